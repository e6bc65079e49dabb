"""Generering av iCal-filer för skiftmönster och larm."""

import datetime
from collections.abc import Iterable

from icalendar import Alarm, Calendar, Event

from shiftcal.core.models import ScheduledNotification, ShiftPattern, ShiftType
from shiftcal.core.utils import UTC

PRODID = "-//shiftcal//shift schedule//EN"
UID_DOMAIN = "shiftcal"


def _new_calendar(name: str) -> Calendar:
    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", name)
    return cal


def generate_ical(
    pattern: ShiftPattern,
    start_date: datetime.date,
    end_date: datetime.date,
) -> str:
    """
    Genererar en iCal-fil med mönstrets arbetsdagar.

    Varje dag- eller nattskift blir ett heldagsevent. Lediga dagar hoppas över.

    Args:
        pattern: Skiftmönstret
        start_date: Första datum i intervallet
        end_date: Sista datum i intervallet (inklusive)

    Returns:
        iCal-formaterad sträng

    Raises:
        ValueError: Om end_date ligger före start_date
    """
    if end_date < start_date:
        raise ValueError(f"end_date {end_date} is before start_date {start_date}")

    cal = _new_calendar(pattern.name)
    dtstamp = datetime.datetime.now(UTC)

    current_date = start_date
    while current_date <= end_date:
        shift = pattern.get_shift_for_date(current_date)
        if shift is not ShiftType.OFF:
            cal.add_component(_create_shift_event(pattern, current_date, shift, dtstamp))
        current_date += datetime.timedelta(days=1)

    return cal.to_ical().decode("utf-8")


def _create_shift_event(
    pattern: ShiftPattern,
    date: datetime.date,
    shift: ShiftType,
    dtstamp: datetime.datetime,
) -> Event:
    event = Event()
    event.add("summary", f"{shift.display_name} shift")
    event.add("uid", f"{date.isoformat()}_{pattern.id}_{shift.value}@{UID_DOMAIN}")
    event.add("dtstart", date)
    event.add("dtend", date + datetime.timedelta(days=1))
    day_in_cycle = pattern.cycle_position(date) + 1
    event.add("description", f"{shift.description} ({pattern.name}, day {day_in_cycle}/{pattern.cycle_duration})")
    event.add("dtstamp", dtstamp)
    return event


def generate_alarm_ical(notifications: Iterable[ScheduledNotification], calendar_name: str) -> str:
    """
    Genererar en iCal-fil med schemalagda larm.

    Varje notifiering blir ett kort event med en VALARM som visas vid starttiden.

    Args:
        notifications: Planerade notifieringar
        calendar_name: Kalenderns namn

    Returns:
        iCal-formaterad sträng
    """
    cal = _new_calendar(calendar_name)
    dtstamp = datetime.datetime.now(UTC)

    for notification in notifications:
        event = Event()
        event.add("summary", notification.title)
        event.add("uid", f"{notification.id}_{notification.alarm_id}@{UID_DOMAIN}")
        event.add("dtstart", notification.scheduled_time)
        duration = datetime.timedelta(minutes=notification.settings.snooze_duration)
        event.add("dtend", notification.scheduled_time + duration)
        if notification.message:
            event.add("description", notification.message)
        event.add("dtstamp", dtstamp)

        alarm = Alarm()
        alarm.add("action", "DISPLAY")
        alarm.add("description", notification.message or notification.title)
        alarm.add("trigger", datetime.timedelta(0))
        event.add_component(alarm)

        cal.add_component(event)

    return cal.to_ical().decode("utf-8")
