# shiftcal/routes/alarms.py
"""
API endpoints for shift alarms and notification planning.
"""

import datetime
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from shiftcal.core.calendar_export import generate_alarm_ical
from shiftcal.core.config import SCHEDULING_HORIZON_DAYS
from shiftcal.core.logging_config import LogContext
from shiftcal.core.models import BasicAlarm, ResyncPlan, ScheduledNotification, ShiftAlarm, ShiftPattern
from shiftcal.core.schedule import (
    calculate_alarm_schedule,
    count_scheduled_notifications,
    find_alarm_conflicts,
    generate_cycle_alarms,
    get_next_alarm_time,
    plan_resync,
    validate_pattern_alarms,
)
from shiftcal.core.utils import get_now, get_today
from shiftcal.core.validators import validate_days_ahead
from shiftcal.database.repository import ShiftRepository

from .shared import (
    ResyncRequest,
    ShiftAlarmCreate,
    ShiftAlarmUpdate,
    get_repository,
    require_alarm,
    require_pattern,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/alarms", tags=["alarms"])


def _pattern_or_active(repo: ShiftRepository, pattern_id: str | None) -> ShiftPattern:
    if pattern_id is not None:
        return require_pattern(repo, pattern_id)
    pattern = repo.get_active_pattern()
    if pattern is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active pattern")
    return pattern


@router.get("", response_model=list[ShiftAlarm])
async def list_alarms(pattern_id: str | None = None, repo: ShiftRepository = Depends(get_repository)):
    return repo.list_alarms(pattern_id)


@router.post("", response_model=ShiftAlarm, status_code=status.HTTP_201_CREATED)
async def create_alarm(body: ShiftAlarmCreate, repo: ShiftRepository = Depends(get_repository)):
    require_pattern(repo, body.pattern_id)
    alarm = ShiftAlarm(
        pattern_id=body.pattern_id,
        alarm_type=body.alarm_type,
        target_shift_types=frozenset(body.target_shift_types),
        time=body.time,
        title=body.title,
        message=body.message,
        is_active=body.is_active,
        settings=body.settings,
    )
    repo.save_alarm(alarm)
    logger.info("Created alarm %s for pattern %s", alarm.id, alarm.pattern_id)
    return alarm


@router.get("/next")
async def get_next_alarm(
    pattern_id: str | None = None,
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    """Earliest upcoming alarm time for a pattern (the active one by default)."""
    pattern = _pattern_or_active(repo, pattern_id)
    next_time = get_next_alarm_time(repo.list_alarms(pattern.id), pattern, now)
    return {"pattern_id": pattern.id, "next_alarm_time": next_time}


@router.get("/count")
async def count_notifications(
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    """Number of notifications the active alarms of all active patterns need right now."""
    total = count_scheduled_notifications(repo.list_alarms(), repo.list_patterns(), now)
    return {"total": total}


@router.get("/conflicts")
async def get_conflicts(pattern_id: str, repo: ShiftRepository = Depends(get_repository)):
    pattern = require_pattern(repo, pattern_id)
    alarms = repo.list_alarms(pattern.id)
    conflicts = find_alarm_conflicts(alarms)
    return {
        "pattern_id": pattern.id,
        "valid": validate_pattern_alarms(pattern, alarms),
        "conflicts": [[first.id, second.id] for first, second in conflicts],
    }


@router.post("/resync", response_model=ResyncPlan)
async def resync(
    body: ResyncRequest,
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    """
    Compute what the notification platform should schedule and cancel.

    The caller sends the ids it currently has scheduled; nothing is
    scheduled or cancelled server side.
    """
    basic_alarms = repo.list_basic_alarms() if body.include_basic_alarms else []
    return plan_resync(
        repo.list_alarms(),
        repo.list_patterns(),
        body.scheduled_ids,
        now,
        basic_alarms=basic_alarms,
    )


@router.get("/{alarm_id}", response_model=ShiftAlarm)
async def get_alarm(alarm_id: str, repo: ShiftRepository = Depends(get_repository)):
    return require_alarm(repo, alarm_id)


@router.put("/{alarm_id}", response_model=ShiftAlarm)
async def update_alarm(alarm_id: str, body: ShiftAlarmUpdate, repo: ShiftRepository = Depends(get_repository)):
    alarm = require_alarm(repo, alarm_id)
    changes = body.model_dump(exclude_unset=True)
    if "target_shift_types" in changes:
        changes["target_shift_types"] = frozenset(changes["target_shift_types"])
    return repo.save_alarm(alarm.copy_with(**changes))


@router.delete("/{alarm_id}")
async def delete_alarm(alarm_id: str, repo: ShiftRepository = Depends(get_repository)):
    if not repo.delete_alarm(alarm_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Alarm not found")
    return {"deleted": alarm_id}


@router.post("/{alarm_id}/toggle", response_model=ShiftAlarm)
async def toggle_alarm(alarm_id: str, repo: ShiftRepository = Depends(get_repository)):
    alarm = require_alarm(repo, alarm_id)
    with LogContext(alarm_id=alarm.id):
        toggled = repo.save_alarm(alarm.copy_with(is_active=not alarm.is_active))
        logger.info("Alarm %s is now %s", alarm.id, "active" if toggled.is_active else "inactive")
    return toggled


@router.get("/{alarm_id}/schedule", response_model=list[ScheduledNotification])
async def get_alarm_schedule(
    alarm_id: str,
    horizon_days: int = SCHEDULING_HORIZON_DAYS,
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    validate_days_ahead(horizon_days, "horizon_days")
    alarm = require_alarm(repo, alarm_id)
    pattern = require_pattern(repo, alarm.pattern_id)
    return calculate_alarm_schedule(alarm, pattern, now, horizon_days=horizon_days)


@router.get("/{alarm_id}/calendar.ics")
async def export_alarm_calendar(
    alarm_id: str,
    horizon_days: int = SCHEDULING_HORIZON_DAYS,
    repo: ShiftRepository = Depends(get_repository),
    now: datetime.datetime = Depends(get_now),
):
    """Upcoming occurrences of one alarm as an iCalendar file."""
    validate_days_ahead(horizon_days, "horizon_days")
    alarm = require_alarm(repo, alarm_id)
    pattern = require_pattern(repo, alarm.pattern_id)
    notifications = calculate_alarm_schedule(alarm, pattern, now, horizon_days=horizon_days)
    return Response(
        content=generate_alarm_ical(notifications, alarm.title),
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{alarm_id}.ics"'},
    )


@router.post("/{alarm_id}/cycle-alarms", response_model=list[BasicAlarm], status_code=status.HTTP_201_CREATED)
async def create_cycle_alarms(
    alarm_id: str,
    start_date: datetime.date | None = None,
    repo: ShiftRepository = Depends(get_repository),
    today: datetime.date = Depends(get_today),
):
    """Expand a shift alarm into one cycle of dated basic alarms and store them."""
    alarm = require_alarm(repo, alarm_id)
    pattern = require_pattern(repo, alarm.pattern_id)
    created = generate_cycle_alarms(alarm, pattern, start_date or today)
    for basic_alarm in created:
        repo.save_basic_alarm(basic_alarm)
    return created
