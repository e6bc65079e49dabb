# shiftcal/routes/shared.py
"""
Shared dependencies and request schemas for route modules.
"""

import datetime

from fastapi import Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from shiftcal.core.constants import DEFAULT_VOLUME
from shiftcal.core.models import AlarmSettings, AlarmTone, AlarmType, BasicAlarm, ShiftAlarm, ShiftPattern, ShiftType
from shiftcal.database.database import get_db
from shiftcal.database.repository import ShiftRepository


def get_repository(db: Session = Depends(get_db)) -> ShiftRepository:
    """Dependency for getting a repository over the request's session."""
    return ShiftRepository(db)


def require_pattern(repo: ShiftRepository, pattern_id: str) -> ShiftPattern:
    pattern = repo.get_pattern(pattern_id)
    if pattern is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pattern not found")
    return pattern


def require_alarm(repo: ShiftRepository, alarm_id: str) -> ShiftAlarm:
    alarm = repo.get_alarm(alarm_id)
    if alarm is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alarm not found")
    return alarm


def require_basic_alarm(repo: ShiftRepository, alarm_id: str) -> BasicAlarm:
    alarm = repo.get_basic_alarm(alarm_id)
    if alarm is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Basic alarm not found")
    return alarm


# ============ Pydantic schemas ============


class RequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PatternCreate(RequestModel):
    name: str = Field(min_length=1, max_length=100)
    cycle: list[ShiftType] = Field(min_length=1)
    start_date: datetime.date | None = None  # default: today
    is_active: bool = True
    set_active: bool = False
    with_default_alarms: bool = True


class PatternUpdate(RequestModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    cycle: list[ShiftType] | None = Field(default=None, min_length=1)
    start_date: datetime.date | None = None
    is_active: bool | None = None


class ActivePatternUpdate(RequestModel):
    pattern_id: str | None


class ShiftAlarmCreate(RequestModel):
    pattern_id: str
    target_shift_types: list[ShiftType] = Field(min_length=1)
    time: datetime.time
    title: str = Field(min_length=1, max_length=200)
    message: str = ""
    alarm_type: AlarmType | None = None  # inferred from targets when missing
    is_active: bool = True
    settings: AlarmSettings = Field(default_factory=AlarmSettings)


class ShiftAlarmUpdate(RequestModel):
    target_shift_types: list[ShiftType] | None = Field(default=None, min_length=1)
    time: datetime.time | None = None
    title: str | None = Field(default=None, min_length=1, max_length=200)
    message: str | None = None
    alarm_type: AlarmType | None = None
    is_active: bool | None = None
    settings: AlarmSettings | None = None


class BasicAlarmCreate(RequestModel):
    label: str = Field(min_length=1, max_length=200)
    time: datetime.time
    repeat_days: list[int] = Field(default_factory=list)
    is_active: bool = True
    tone: AlarmTone = AlarmTone.WAKEUP_CALL
    volume: float = Field(default=DEFAULT_VOLUME, ge=0.0, le=1.0)
    alarm_type: AlarmType = AlarmType.BASIC
    scheduled_date: datetime.date | None = None


class BasicAlarmUpdate(RequestModel):
    label: str | None = Field(default=None, min_length=1, max_length=200)
    time: datetime.time | None = None
    repeat_days: list[int] | None = None
    is_active: bool | None = None
    tone: AlarmTone | None = None
    volume: float | None = Field(default=None, ge=0.0, le=1.0)
    alarm_type: AlarmType | None = None
    scheduled_date: datetime.date | None = None


class ResyncRequest(RequestModel):
    scheduled_ids: list[int] = Field(default_factory=list)
    include_basic_alarms: bool = True
