# shiftcal/routes/patterns.py
"""
API endpoints for shift patterns and their day-level projections.
"""

import datetime
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from shiftcal.core.calendar_export import generate_ical
from shiftcal.core.config import NEXT_SHIFT_SEARCH_DAYS, PREVIEW_DAYS
from shiftcal.core.models import DayPreview, ShiftPattern
from shiftcal.core.schedule import SchedulingService, create_default_alarms, preset_patterns
from shiftcal.core.utils import get_today, utc_now
from shiftcal.core.validators import parse_shift_code, parse_shift_codes, validate_date_range, validate_days_ahead
from shiftcal.database.repository import ShiftRepository

from .shared import ActivePatternUpdate, PatternCreate, PatternUpdate, get_repository, require_pattern

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/patterns", tags=["patterns"])

# Standardlängd för kalenderexport
CALENDAR_EXPORT_DAYS = 90


@router.get("", response_model=list[ShiftPattern])
async def list_patterns(repo: ShiftRepository = Depends(get_repository)):
    return repo.list_patterns()


@router.post("", response_model=ShiftPattern, status_code=status.HTTP_201_CREATED)
async def create_pattern(
    body: PatternCreate,
    repo: ShiftRepository = Depends(get_repository),
    today: datetime.date = Depends(get_today),
):
    """
    Create a pattern, optionally with the default alarm trio.

    The first pattern created becomes the active one.
    """
    pattern = ShiftPattern(
        name=body.name,
        cycle=tuple(body.cycle),
        start_date=body.start_date or today,
        is_active=body.is_active,
    )
    repo.save_pattern(pattern)

    if body.with_default_alarms:
        for alarm in create_default_alarms(pattern.id):
            repo.save_alarm(alarm)

    if body.set_active or repo.get_active_pattern_id() is None:
        repo.set_active_pattern(pattern.id)

    logger.info("Created pattern %s (%s)", pattern.id, pattern)
    return pattern


@router.get("/presets", response_model=list[ShiftPattern])
async def list_presets(today: datetime.date = Depends(get_today)):
    """Preset patterns anchored on today. They are not stored."""
    return preset_patterns(today)


@router.get("/active", response_model=ShiftPattern)
async def get_active_pattern(repo: ShiftRepository = Depends(get_repository)):
    pattern = repo.get_active_pattern()
    if pattern is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active pattern")
    return pattern


@router.put("/active")
async def set_active_pattern(body: ActivePatternUpdate, repo: ShiftRepository = Depends(get_repository)):
    if body.pattern_id is not None:
        require_pattern(repo, body.pattern_id)
    repo.set_active_pattern(body.pattern_id)
    return {"active_pattern_id": body.pattern_id}


@router.get("/{pattern_id}", response_model=ShiftPattern)
async def get_pattern(pattern_id: str, repo: ShiftRepository = Depends(get_repository)):
    return require_pattern(repo, pattern_id)


@router.put("/{pattern_id}", response_model=ShiftPattern)
async def update_pattern(pattern_id: str, body: PatternUpdate, repo: ShiftRepository = Depends(get_repository)):
    pattern = require_pattern(repo, pattern_id)
    changes = body.model_dump(exclude_unset=True)
    if "cycle" in changes:
        changes["cycle"] = tuple(changes["cycle"])
    updated = pattern.copy_with(**changes, updated_at=utc_now())
    return repo.save_pattern(updated)


@router.delete("/{pattern_id}")
async def delete_pattern(pattern_id: str, repo: ShiftRepository = Depends(get_repository)):
    """Delete a pattern and all of its shift alarms."""
    if not repo.delete_pattern(pattern_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pattern not found")
    return {"deleted": pattern_id}


@router.get("/{pattern_id}/shift")
async def get_shift_for_date(
    pattern_id: str,
    date: datetime.date | None = None,
    repo: ShiftRepository = Depends(get_repository),
    today: datetime.date = Depends(get_today),
):
    """Shift on a date, today by default."""
    pattern = require_pattern(repo, pattern_id)
    check_date = date or today
    shift = pattern.get_shift_for_date(check_date)
    return {
        "date": check_date,
        "shift_type": shift,
        "display_name": shift.display_name,
        "short_code": shift.short_code,
        "cycle_position": pattern.cycle_position(check_date),
    }


@router.get("/{pattern_id}/current")
async def get_current_shift(
    pattern_id: str,
    repo: ShiftRepository = Depends(get_repository),
    today: datetime.date = Depends(get_today),
):
    pattern = require_pattern(repo, pattern_id)
    shift = SchedulingService(clock=lambda: today).get_current_shift(pattern)
    return {"date": today, "shift_type": shift, "display_name": shift.display_name}


@router.get("/{pattern_id}/next")
async def get_next_shift_date(
    pattern_id: str,
    shift: str,
    from_date: datetime.date | None = None,
    horizon_days: int = NEXT_SHIFT_SEARCH_DAYS,
    repo: ShiftRepository = Depends(get_repository),
    today: datetime.date = Depends(get_today),
):
    """Next date with the given shift, or null when none falls within the horizon."""
    validate_days_ahead(horizon_days, "horizon_days")
    target = parse_shift_code(shift)
    pattern = require_pattern(repo, pattern_id)
    next_date = pattern.get_next_shift_date(target, from_date or today, horizon_days)
    return {"shift_type": target, "date": next_date}


@router.get("/{pattern_id}/upcoming")
async def get_upcoming_shifts(
    pattern_id: str,
    shifts: str = Query(..., description="Comma-separated shift codes, e.g. day,night"),
    days_ahead: int = PREVIEW_DAYS,
    repo: ShiftRepository = Depends(get_repository),
    today: datetime.date = Depends(get_today),
):
    validate_days_ahead(days_ahead)
    targets = parse_shift_codes(shifts)
    pattern = require_pattern(repo, pattern_id)
    return {"dates": pattern.get_upcoming_shifts(targets, days_ahead, today=today)}


@router.get("/{pattern_id}/preview", response_model=list[DayPreview])
async def get_preview(
    pattern_id: str,
    days_ahead: int = PREVIEW_DAYS,
    repo: ShiftRepository = Depends(get_repository),
    today: datetime.date = Depends(get_today),
):
    """One entry per day from today, exactly days_ahead entries."""
    validate_days_ahead(days_ahead)
    pattern = require_pattern(repo, pattern_id)
    service = SchedulingService(clock=lambda: today)
    return service.get_upcoming_shifts(pattern, days_ahead)


@router.get("/{pattern_id}/calendar.ics")
async def export_calendar(
    pattern_id: str,
    start: datetime.date | None = None,
    end: datetime.date | None = None,
    repo: ShiftRepository = Depends(get_repository),
    today: datetime.date = Depends(get_today),
):
    """Working days of the pattern as an iCalendar file."""
    pattern = require_pattern(repo, pattern_id)
    start_date = start or today
    end_date = end or start_date + datetime.timedelta(days=CALENDAR_EXPORT_DAYS - 1)
    validate_date_range(start_date, end_date)

    ical = generate_ical(pattern, start_date, end_date)
    return Response(
        content=ical,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{pattern_id}.ics"'},
    )
