# shiftcal/routes/basic_alarms.py
"""
API endpoints for basic (shift-independent) alarms.
"""

import datetime

from fastapi import APIRouter, Depends, HTTPException, status

from shiftcal.core.models import AlarmTone, AlarmType, BasicAlarm, ScheduledNotification
from shiftcal.core.schedule import (
    arm_one_time_alarm,
    build_basic_notifications,
    next_occurrence,
    should_alarm_trigger,
)
from shiftcal.core.utils import get_now, get_today
from shiftcal.database.repository import ShiftRepository

from .shared import BasicAlarmCreate, BasicAlarmUpdate, get_repository, require_basic_alarm

router = APIRouter(prefix="/api/basic-alarms", tags=["basic_alarms"])

# Ändringar som gör att ett engångslarm låses om till nästa klockslag
REARM_FIELDS = frozenset({"time", "is_active", "repeat_days"})


@router.get("", response_model=list[BasicAlarm])
async def list_basic_alarms(repo: ShiftRepository = Depends(get_repository)):
    return repo.list_basic_alarms()


@router.post("", response_model=BasicAlarm, status_code=status.HTTP_201_CREATED)
async def create_basic_alarm(
    body: BasicAlarmCreate,
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    """Create an alarm. A one-time alarm is pinned to the next time it can fire."""
    alarm = BasicAlarm(**{**body.model_dump(), "repeat_days": frozenset(body.repeat_days)})
    return repo.save_basic_alarm(arm_one_time_alarm(alarm, now))


@router.get("/tones")
async def list_tones():
    """Bundled alarm tones with display names and sound file paths."""
    return [{"id": tone.value, "name": tone.display_name, "sound_path": tone.sound_path} for tone in AlarmTone]


@router.get("/{alarm_id}", response_model=BasicAlarm)
async def get_basic_alarm(alarm_id: str, repo: ShiftRepository = Depends(get_repository)):
    return require_basic_alarm(repo, alarm_id)


@router.put("/{alarm_id}", response_model=BasicAlarm)
async def update_basic_alarm(
    alarm_id: str,
    body: BasicAlarmUpdate,
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    alarm = require_basic_alarm(repo, alarm_id)
    changes = body.model_dump(exclude_unset=True)
    if "repeat_days" in changes:
        changes["repeat_days"] = frozenset(changes["repeat_days"] or ())
    updated = alarm.copy_with(**changes)
    rearm = REARM_FIELDS.intersection(changes) and "scheduled_date" not in changes
    if rearm and updated.alarm_type is AlarmType.BASIC:
        updated = arm_one_time_alarm(updated.copy_with(scheduled_date=None), now)
    return repo.save_basic_alarm(updated)


@router.delete("/{alarm_id}")
async def delete_basic_alarm(alarm_id: str, repo: ShiftRepository = Depends(get_repository)):
    if not repo.delete_basic_alarm(alarm_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Basic alarm not found")
    return {"deleted": alarm_id}


@router.post("/{alarm_id}/toggle", response_model=BasicAlarm)
async def toggle_basic_alarm(
    alarm_id: str,
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    """Flip is_active. Turning a one-time alarm back on re-arms it for its next time."""
    alarm = require_basic_alarm(repo, alarm_id)
    return repo.save_basic_alarm(arm_one_time_alarm(alarm.copy_with(is_active=not alarm.is_active), now))


@router.get("/{alarm_id}/next")
async def get_next_occurrence(
    alarm_id: str,
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    alarm = require_basic_alarm(repo, alarm_id)
    return {
        "alarm_id": alarm.id,
        "next_occurrence": next_occurrence(alarm, now),
        "repeat_days_display": alarm.repeat_days_display,
    }


@router.get("/{alarm_id}/notifications", response_model=list[ScheduledNotification])
async def get_notifications(
    alarm_id: str,
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    return build_basic_notifications(require_basic_alarm(repo, alarm_id), now)


@router.get("/{alarm_id}/should-trigger")
async def check_trigger(
    alarm_id: str,
    on_date: datetime.date | None = None,
    repo: ShiftRepository = Depends(get_repository),
    today: datetime.date = Depends(get_today),
):
    """Whether the alarm should fire on a date, checked against the active pattern."""
    alarm = require_basic_alarm(repo, alarm_id)
    check_date = on_date or today
    return {
        "alarm_id": alarm.id,
        "date": check_date,
        "should_trigger": should_alarm_trigger(alarm, repo.get_active_pattern(), check_date),
    }
