"""Förinställda mönster, exempelmönster och standardlarm."""

import datetime
import logging
from collections.abc import Iterable
from typing import NamedTuple

from shiftcal.core.constants import DEFAULT_ALARMS, PRESET_PATTERNS
from shiftcal.core.models import AlarmType, ShiftAlarm, ShiftPattern, ShiftType

logger = logging.getLogger(__name__)


class DefaultAlarmReconciliation(NamedTuple):
    """Resultat av städningen av ett mönsters standardlarm."""

    alarms: list[ShiftAlarm]
    removed: list[ShiftAlarm]
    added: list[ShiftAlarm]


def preset_patterns(today: datetime.date) -> list[ShiftPattern]:
    """De förinställda mönstren, alla förankrade på today."""
    return [
        ShiftPattern(name=name, cycle=tuple(ShiftType(code) for code in codes), start_date=today)
        for name, codes in PRESET_PATTERNS
    ]


def create_sample_pattern(today: datetime.date) -> ShiftPattern:
    """Exempelmönstret som skapas vid första start (Day-Day-Night-Night-Off-Off)."""
    name, codes = PRESET_PATTERNS[0]
    return ShiftPattern(name=name, cycle=tuple(ShiftType(code) for code in codes), start_date=today)


def create_default_alarms(pattern_id: str, now: datetime.datetime | None = None) -> list[ShiftAlarm]:
    """
    Standardtrion av larm för ett mönster: dag 06:00, natt 18:00, ledig 09:00.

    Args:
        pattern_id: Mönstret larmen hör till
        now: Skapandetid, annars aktuell tid

    Returns:
        Tre larm, ett per skifttyp
    """
    alarms = []
    for type_code, hour, minute, title, message in DEFAULT_ALARMS:
        fields = {
            "pattern_id": pattern_id,
            "alarm_type": AlarmType(type_code),
            "target_shift_types": frozenset({ShiftType(type_code)}),
            "time": datetime.time(hour, minute),
            "title": title,
            "message": message,
        }
        if now is not None:
            fields["created_at"] = now
        alarms.append(ShiftAlarm(**fields))
    return alarms


def reconcile_default_alarms(
    alarms: Iterable[ShiftAlarm],
    pattern_id: str,
    now: datetime.datetime | None = None,
) -> DefaultAlarmReconciliation:
    """
    Städar ett mönsters larm.

    Behåller det nyaste larmet per larmtyp och lägger till standardlarm för
    typer som saknas. Larm för andra mönster ignoreras.

    Returns:
        DefaultAlarmReconciliation med slutlig lista, borttagna dubbletter och tillagda larm
    """
    newest: dict[AlarmType, ShiftAlarm] = {}
    removed = []
    for alarm in sorted(
        (a for a in alarms if a.pattern_id == pattern_id),
        key=lambda a: a.created_at,
        reverse=True,
    ):
        if alarm.alarm_type in newest:
            removed.append(alarm)
        else:
            newest[alarm.alarm_type] = alarm

    added = [alarm for alarm in create_default_alarms(pattern_id, now) if alarm.alarm_type not in newest]
    kept = list(newest.values()) + added

    if removed or added:
        logger.info(
            "Reconciled default alarms for pattern %s: removed %d duplicates, added %d",
            pattern_id,
            len(removed),
            len(added),
        )

    return DefaultAlarmReconciliation(alarms=kept, removed=removed, added=added)
