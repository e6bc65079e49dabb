"""Planering av notifieringar för skiftlarm över en rullande horisont."""

import datetime
import itertools
import logging
import zlib
from collections.abc import Iterable

from shiftcal.core.config import (
    MAX_NOTIFICATIONS_PER_ALARM,
    NOTIFICATION_ID_MODULUS,
    SCHEDULING_HORIZON_DAYS,
)
from shiftcal.core.constants import PLACEHOLDER_SHIFT, PLACEHOLDER_SHIFT_CODE, PLACEHOLDER_SHIFT_DESC
from shiftcal.core.models import ScheduledNotification, ShiftAlarm, ShiftPattern, ShiftType

logger = logging.getLogger(__name__)


def format_message(template: str, shift: ShiftType) -> str:
    """
    Fyller i skiftets platshållare i en meddelandemall.

    Längre platshållare ersätts först så att {shift} inte äter upp {shift_code}.
    """
    return (
        template.replace(PLACEHOLDER_SHIFT_CODE, shift.short_code)
        .replace(PLACEHOLDER_SHIFT_DESC, shift.description)
        .replace(PLACEHOLDER_SHIFT, shift.display_name)
    )


def notification_id(alarm_id: str, date: datetime.date) -> int:
    """
    Deterministiskt notifierings-id för ett larm en viss dag.

    Larm-id och datum hashas tillsammans med CRC32, som är stabilt mellan
    processer till skillnad från hash() på strängar. Kollisioner mellan larm
    löses i plan_resync.

    Returns:
        Heltal i [0, 2147483647)
    """
    key = f"{alarm_id}_{date.isoformat()}"
    return zlib.crc32(key.encode("utf-8")) % NOTIFICATION_ID_MODULUS


def calculate_alarm_schedule(
    alarm: ShiftAlarm,
    pattern: ShiftPattern,
    now: datetime.datetime,
    horizon_days: int = SCHEDULING_HORIZON_DAYS,
    max_notifications: int = MAX_NOTIFICATIONS_PER_ALARM,
) -> list[ScheduledNotification]:
    """
    Alla kommande notifieringar för ett skiftlarm inom horisonten.

    Args:
        alarm: Larmet som ska schemaläggas
        pattern: Mönstret larmet hör till
        now: Aktuell lokal tid, tillfällen <= now räknas som passerade
        horizon_days: Antal dagar framåt från dagens datum
        max_notifications: Tak för antal notifieringar

    Returns:
        Notifieringar i stigande tidsordning, tom lista för inaktiva larm

    Raises:
        ValueError: Om horizon_days är negativt
    """
    if not alarm.is_active:
        return []

    dates = pattern.get_upcoming_shifts(alarm.target_shift_types, horizon_days, today=now.date())

    notifications = []
    for date in dates:
        scheduled_time = datetime.datetime.combine(date, alarm.time)
        # Passerade tillfällen schemaläggs aldrig om
        if scheduled_time <= now:
            continue

        shift = pattern.get_shift_for_date(date)
        notifications.append(
            ScheduledNotification(
                id=notification_id(alarm.id, date),
                alarm_id=alarm.id,
                pattern_id=pattern.id,
                scheduled_time=scheduled_time,
                title=alarm.title,
                message=format_message(alarm.message, shift),
                shift_type=shift,
                settings=alarm.settings,
            )
        )
        if len(notifications) >= max_notifications:
            break

    logger.debug("Planned %d notifications for alarm %s", len(notifications), alarm.id)
    return notifications


def get_next_alarm_time(
    alarms: Iterable[ShiftAlarm],
    pattern: ShiftPattern,
    now: datetime.datetime,
) -> datetime.datetime | None:
    """Tidigaste kommande larmtid bland mönstrets aktiva larm, eller None."""
    next_time = None
    for alarm in alarms:
        if not alarm.is_active or alarm.pattern_id != pattern.id:
            continue
        schedule = calculate_alarm_schedule(alarm, pattern, now, max_notifications=1)
        if schedule and (next_time is None or schedule[0].scheduled_time < next_time):
            next_time = schedule[0].scheduled_time
    return next_time


def count_scheduled_notifications(
    alarms: Iterable[ShiftAlarm],
    patterns: Iterable[ShiftPattern],
    now: datetime.datetime,
) -> int:
    """Totalt antal notifieringar för aktiva larm i aktiva mönster."""
    alarm_list = list(alarms)
    total = 0
    for pattern in patterns:
        if not pattern.is_active:
            continue
        for alarm in alarm_list:
            if alarm.pattern_id == pattern.id:
                total += len(calculate_alarm_schedule(alarm, pattern, now))
    return total


def find_alarm_conflicts(alarms: Iterable[ShiftAlarm]) -> list[tuple[ShiftAlarm, ShiftAlarm]]:
    """
    Par av larm som krockar.

    Två larm krockar om de hör till samma mönster, har samma klockslag och
    delar minst en skifttyp. Varje par rapporteras en gång.
    """
    conflicts = []
    for first, second in itertools.combinations(list(alarms), 2):
        if (
            first.id != second.id
            and first.pattern_id == second.pattern_id
            and first.time == second.time
            and first.target_shift_types & second.target_shift_types
        ):
            conflicts.append((first, second))
    return conflicts


def validate_pattern_alarms(pattern: ShiftPattern, alarms: Iterable[ShiftAlarm]) -> bool:
    """
    Kontrollerar att ett mönster har en fungerande larmuppsättning.

    Returns:
        True om mönstret har minst ett aktivt larm och inga krockar
    """
    pattern_alarms = [alarm for alarm in alarms if alarm.pattern_id == pattern.id]
    if not any(alarm.is_active for alarm in pattern_alarms):
        return False
    return not find_alarm_conflicts(pattern_alarms)
