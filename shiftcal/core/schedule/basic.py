"""
Basic alarms: veckodagsrepetition, engångslarm och larm genererade från en skiftcykel.

Basic-larm är oberoende av cykelaritmetiken. Kopplingen till skiftmönster går
via ``scheduled_date`` (genererade engångslarm) och ``alarm_type`` som
kontrolleras mot mönstret när larmet löser ut.
"""

import datetime
import logging
from collections.abc import Iterable

from shiftcal.core.config import VALID_DATE_SEARCH_DAYS
from shiftcal.core.constants import CYCLE_ALARM_PREFIX, DAYS_PER_WEEK, WEEKDAY_NAMES
from shiftcal.core.models import (
    AlarmSettings,
    AlarmType,
    BasicAlarm,
    ScheduledNotification,
    ShiftAlarm,
    ShiftPattern,
    describe_repeat_days,
)
from shiftcal.core.utils import EPOCH_DATE, date_range, utc_now

from .notifications import notification_id

logger = logging.getLogger(__name__)

BASIC_ALARM_MESSAGE = "Time to wake up!"
CYCLE_ALARM_LABEL_MARKER = "\N{ANTICLOCKWISE DOWNWARDS AND UPWARDS OPEN CIRCLE ARROWS}"


def repeat_days_display(repeat_days: Iterable[int]) -> str:
    """Visningstext för repetitionsdagar: "Once", "Every day", "Weekdays", "Weekends" eller "Mon, Wed"."""
    return describe_repeat_days(repeat_days)


def _next_weekday_occurrence(alarm: BasicAlarm, weekday: int, now: datetime.datetime) -> datetime.datetime:
    # weekday i isoweekday-numrering, 1=måndag
    days_until = (weekday - now.isoweekday()) % DAYS_PER_WEEK
    candidate = datetime.datetime.combine(now.date() + datetime.timedelta(days=days_until), alarm.time)
    if candidate <= now:
        candidate += datetime.timedelta(days=DAYS_PER_WEEK)
    return candidate


def _first_instant_after(alarm: BasicAlarm, moment: datetime.datetime) -> datetime.datetime:
    candidate = datetime.datetime.combine(moment.date(), alarm.time)
    if candidate <= moment:
        candidate += datetime.timedelta(days=1)
    return candidate


def one_time_instant(alarm: BasicAlarm) -> datetime.datetime:
    """
    Den enda tidpunkten ett engångslarm utan scheduled_date går.

    Larmet förankras i första klockslaget efter created_at (omräknat till
    lokal tid), så ett larm som redan gått schemaläggs aldrig om.
    """
    created_local = alarm.created_at.astimezone().replace(tzinfo=None)
    return _first_instant_after(alarm, created_local)


def arm_one_time_alarm(alarm: BasicAlarm, now: datetime.datetime) -> BasicAlarm:
    """
    Låser ett aktivt engångslarm till nästa klockslag efter now.

    Används när larmet skapas, ändras eller slås på igen. Repeterande larm,
    inaktiva larm, typade (cykelgenererade) larm och larm vars låsta
    tidpunkt ligger framåt i tiden returneras oförändrade.
    """
    if not alarm.is_active or not alarm.is_one_time or alarm.alarm_type is not AlarmType.BASIC:
        return alarm
    if alarm.scheduled_date is not None and datetime.datetime.combine(alarm.scheduled_date, alarm.time) > now:
        return alarm
    return alarm.copy_with(scheduled_date=_first_instant_after(alarm, now).date())


def next_occurrence(alarm: BasicAlarm, now: datetime.datetime) -> datetime.datetime | None:
    """
    Nästa tidpunkt då ett basic-larm ska gå.

    Args:
        alarm: Larmet
        now: Aktuell lokal tid

    Returns:
        - None för inaktiva larm
        - scheduled_date + klockslag, eller None om den tidpunkten redan passerat
        - engångslarm: första klockslaget efter created_at, eller None när det passerat
        - repeterande: närmaste matchande veckodag efter now
    """
    if not alarm.is_active:
        return None

    if alarm.scheduled_date is not None:
        pinned = datetime.datetime.combine(alarm.scheduled_date, alarm.time)
        return pinned if pinned > now else None

    if alarm.is_one_time:
        anchored = one_time_instant(alarm)
        return anchored if anchored > now else None

    return min(_next_weekday_occurrence(alarm, weekday, now) for weekday in alarm.repeat_days)


def _basic_settings(alarm: BasicAlarm) -> AlarmSettings:
    return AlarmSettings(tone=alarm.tone, volume=alarm.volume)


def build_basic_notifications(alarm: BasicAlarm, now: datetime.datetime) -> list[ScheduledNotification]:
    """
    Notifieringar för ett basic-larm.

    Engångslarm ger en notifiering. Repeterande larm ger en veckovis
    repeterande notifiering per veckodag, med id som bara beror på larm och
    veckodag så att samma larm alltid får samma id.
    """
    if not alarm.is_active:
        return []

    if alarm.is_one_time or alarm.scheduled_date is not None:
        when = next_occurrence(alarm, now)
        if when is None:
            return []
        return [
            ScheduledNotification(
                id=notification_id(alarm.id, when.date()),
                alarm_id=alarm.id,
                scheduled_time=when,
                title=alarm.label,
                message=BASIC_ALARM_MESSAGE,
                settings=_basic_settings(alarm),
            )
        ]

    notifications = []
    for weekday in sorted(alarm.repeat_days):
        notifications.append(
            ScheduledNotification(
                id=notification_id(f"{alarm.id}_{weekday}", EPOCH_DATE),
                alarm_id=alarm.id,
                scheduled_time=_next_weekday_occurrence(alarm, weekday, now),
                title=alarm.label,
                message=f"{BASIC_ALARM_MESSAGE} ({WEEKDAY_NAMES[weekday - 1]})",
                settings=_basic_settings(alarm),
                repeats_weekly=True,
            )
        )
    return notifications


def cycle_alarm_id(shift_alarm: ShiftAlarm, alarm_type: AlarmType, date: datetime.date) -> str:
    """Id för ett cykelgenererat larm: cycle_<larm>_<typ>_<YYYY-MM-DD>_<HHMM>."""
    time_str = f"{shift_alarm.time.hour:02d}{shift_alarm.time.minute:02d}"
    return f"{CYCLE_ALARM_PREFIX}{shift_alarm.id}_{alarm_type.value}_{date.isoformat()}_{time_str}"


def generate_cycle_alarms(
    shift_alarm: ShiftAlarm,
    pattern: ShiftPattern,
    start_date: datetime.date,
) -> list[BasicAlarm]:
    """
    Skapar engångslarm för en hel cykel med början på start_date.

    Varje dag i [start_date, start_date + cykellängd) vars skift finns bland
    larmets målskift ger ett BasicAlarm låst till den dagen och typat efter
    det matchade skiftet.

    Args:
        shift_alarm: Skiftlarmet som ska expanderas
        pattern: Mönstret som bestämmer dagarna
        start_date: Första dagen i cykelfönstret

    Returns:
        Ett BasicAlarm per matchande dag, i datumordning
    """
    created_at = utc_now()
    alarms = []
    for date in date_range(start_date, pattern.cycle_duration):
        shift = pattern.get_shift_for_date(date)
        if not shift_alarm.fires_on(shift):
            continue
        alarm_type = AlarmType.for_shift(shift)
        alarms.append(
            BasicAlarm(
                id=cycle_alarm_id(shift_alarm, alarm_type, date),
                label=f"{CYCLE_ALARM_LABEL_MARKER} {shift_alarm.title} ({shift.display_name})",
                time=shift_alarm.time,
                is_active=shift_alarm.is_active,
                tone=shift_alarm.settings.tone,
                volume=shift_alarm.settings.volume,
                created_at=created_at,
                alarm_type=alarm_type,
                scheduled_date=date,
            )
        )

    logger.info("Generated %d cycle alarms for %s from %s", len(alarms), shift_alarm.id, start_date)
    return alarms


def should_alarm_trigger(alarm: BasicAlarm, pattern: ShiftPattern | None, on_date: datetime.date) -> bool:
    """
    Kontroll vid utlösning: ska larmet faktiskt gå på on_date?

    Basic-larm går alltid. Typade larm går bara när mönstrets skift den dagen
    matchar larmtypen, och aldrig om inget mönster finns.
    """
    if alarm.alarm_type is AlarmType.BASIC:
        return True
    if pattern is None:
        return False
    return alarm.alarm_type.matches(pattern.get_shift_for_date(on_date))


def next_valid_date_for_alarm_type(
    alarm_type: AlarmType,
    pattern: ShiftPattern | None,
    start: datetime.date,
    max_days: int = VALID_DATE_SEARCH_DAYS,
) -> datetime.date | None:
    """
    Första dagen från och med start då en larmtyp är giltig i mönstret.

    Returns:
        start för basic-larm, None utan mönster eller utan träff inom max_days
    """
    if alarm_type is AlarmType.BASIC:
        return start
    if pattern is None:
        return None
    for date in date_range(start, max_days):
        if alarm_type.matches(pattern.get_shift_for_date(date)):
            return date
    return None
