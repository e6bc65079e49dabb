# shiftcal/core/records.py
"""
Flat record encoding for patterns and alarms.

Records are the shape the persistence layer and the JSON export work with:
plain dicts with ``_``-separated keys, 1/0 booleans, epoch-millisecond dates
and timestamps, and comma-joined code lists. Decoding is lenient about codes
(unknown shift, alarm type and tone codes fall back to defaults with a
warning) but strict about structure.
"""

import datetime
import logging
from collections.abc import Mapping
from typing import Any

from shiftcal.core.config import MS_PER_DAY
from shiftcal.core.constants import DEFAULT_BASIC_LABEL, DEFAULT_VOLUME
from shiftcal.core.models import (
    DEFAULT_SHIFT_TYPE,
    DEFAULT_TONE,
    AlarmSettings,
    AlarmTone,
    AlarmType,
    BasicAlarm,
    ShiftAlarm,
    ShiftPattern,
    ShiftType,
    infer_alarm_type,
)
from shiftcal.core.types import BasicAlarmRecord, ShiftAlarmRecord, ShiftPatternRecord
from shiftcal.core.utils import EPOCH, EPOCH_DATE, UTC

logger = logging.getLogger(__name__)

SETTINGS_PREFIX = "settings_"


class RecordError(ValueError):
    """Raised when a stored record is structurally unusable."""

    pass


# === Primitive codecs ===


def date_to_millis(value: datetime.date) -> int:
    """Epoch milliseconds of UTC midnight on ``value``."""
    return (value - EPOCH_DATE).days * MS_PER_DAY


def millis_to_date(value: int) -> datetime.date:
    """
    Decode an epoch-millisecond date.

    Rounds to the nearest day, so a record written as local midnight keeps
    its calendar date for clients between UTC-11 and UTC+12. Offsets beyond
    that (UTC+13, UTC+14 and UTC-12) move more than half a day and decode to
    a neighbouring date.
    """
    return EPOCH_DATE + datetime.timedelta(days=(int(value) + MS_PER_DAY // 2) // MS_PER_DAY)


def datetime_to_millis(value: datetime.datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - EPOCH) // datetime.timedelta(milliseconds=1)


def millis_to_datetime(value: int) -> datetime.datetime:
    return EPOCH + datetime.timedelta(milliseconds=int(value))


def _to_flag(value: bool) -> int:
    return 1 if value else 0


def _from_flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    return value in (1, True, "1", "true")


# === Enum codecs ===


def shift_type_from_code(code: Any) -> ShiftType:
    try:
        return ShiftType(code)
    except ValueError:
        logger.warning("Unknown shift type code %r, falling back to %s", code, DEFAULT_SHIFT_TYPE.value)
        return DEFAULT_SHIFT_TYPE


def tone_from_code(code: Any) -> AlarmTone:
    if code is None:
        return DEFAULT_TONE
    try:
        return AlarmTone(code)
    except ValueError:
        logger.warning("Unknown alarm tone code %r, falling back to %s", code, DEFAULT_TONE.value)
        return DEFAULT_TONE


def alarm_type_from_code(code: Any, default: AlarmType) -> AlarmType:
    if code is None:
        return default
    try:
        return AlarmType(code)
    except ValueError:
        logger.warning("Unknown alarm type code %r, falling back to %s", code, default.value)
        return default


def _split_codes(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(part) for part in value]


# === Settings ===


def settings_to_record(settings: AlarmSettings) -> dict[str, Any]:
    return {
        "settings_vibration": _to_flag(settings.vibration),
        "settings_sound": _to_flag(settings.sound),
        "settings_tone": settings.tone.value,
        "settings_volume": settings.volume,
        "settings_snooze": _to_flag(settings.snooze),
        "settings_snooze_duration": settings.snooze_duration,
        "settings_max_snooze_count": settings.max_snooze_count,
    }


def settings_from_record(record: Mapping[str, Any]) -> AlarmSettings:
    """
    Read alarm settings from either flattened ``settings_*`` keys or a nested
    ``settings`` map (older exports). Missing fields take their defaults.
    """
    nested = record.get("settings")
    if isinstance(nested, Mapping):
        values = dict(nested)
    else:
        values = {
            key[len(SETTINGS_PREFIX) :]: value for key, value in record.items() if key.startswith(SETTINGS_PREFIX)
        }

    defaults = AlarmSettings()
    return AlarmSettings(
        vibration=_from_flag(values.get("vibration"), defaults.vibration),
        sound=_from_flag(values.get("sound"), defaults.sound),
        tone=tone_from_code(values.get("tone")),
        volume=float(values.get("volume", defaults.volume)),
        snooze=_from_flag(values.get("snooze"), defaults.snooze),
        snooze_duration=int(values.get("snooze_duration", defaults.snooze_duration)),
        max_snooze_count=int(values.get("max_snooze_count", defaults.max_snooze_count)),
    )


# === Entities ===


def _require_mapping(record: Any, kind: str) -> None:
    if not isinstance(record, Mapping):
        raise RecordError(f"Invalid {kind} record: must be an object, got {type(record).__name__}")


def pattern_to_record(pattern: ShiftPattern) -> ShiftPatternRecord:
    return {
        "id": pattern.id,
        "name": pattern.name,
        "cycle": [shift.value for shift in pattern.cycle],
        "start_date": date_to_millis(pattern.start_date),
        "is_active": _to_flag(pattern.is_active),
        "created_at": datetime_to_millis(pattern.created_at),
        "updated_at": datetime_to_millis(pattern.updated_at) if pattern.updated_at else None,
    }


def pattern_from_record(record: Mapping[str, Any]) -> ShiftPattern:
    """
    Build a ShiftPattern from a stored record.

    Raises:
        RecordError: If required fields are missing or the cycle is empty
    """
    _require_mapping(record, "shift pattern")
    try:
        updated_at = record.get("updated_at")
        return ShiftPattern(
            id=record["id"],
            name=record["name"],
            cycle=tuple(shift_type_from_code(code) for code in _split_codes(record["cycle"])),
            start_date=millis_to_date(record["start_date"]),
            is_active=_from_flag(record.get("is_active"), True),
            created_at=millis_to_datetime(record["created_at"]),
            updated_at=millis_to_datetime(updated_at) if updated_at is not None else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.exception("Failed to decode shift pattern record %r", record.get("id"))
        raise RecordError(f"Invalid shift pattern record: {e}") from e


def shift_alarm_to_record(alarm: ShiftAlarm) -> ShiftAlarmRecord:
    record: ShiftAlarmRecord = {
        "id": alarm.id,
        "pattern_id": alarm.pattern_id,
        "alarm_type": alarm.alarm_type.value,
        "target_shift_types": ",".join(shift.value for shift in ShiftType if shift in alarm.target_shift_types),
        "time_hour": alarm.time.hour,
        "time_minute": alarm.time.minute,
        "title": alarm.title,
        "message": alarm.message,
        "is_active": _to_flag(alarm.is_active),
        "created_at": datetime_to_millis(alarm.created_at),
    }
    record.update(settings_to_record(alarm.settings))  # type: ignore[typeddict-item]
    return record


def shift_alarm_from_record(record: Mapping[str, Any]) -> ShiftAlarm:
    """
    Build a ShiftAlarm from a stored record.

    Records without ``alarm_type`` get one inferred from targets and title.

    Raises:
        RecordError: If required fields are missing or invalid
    """
    _require_mapping(record, "shift alarm")
    try:
        targets = frozenset(shift_type_from_code(code) for code in _split_codes(record["target_shift_types"]))
        title = record.get("title") or ""
        inferred = infer_alarm_type(targets, title)
        return ShiftAlarm(
            id=record["id"],
            pattern_id=record["pattern_id"],
            alarm_type=alarm_type_from_code(record.get("alarm_type"), inferred),
            target_shift_types=targets,
            time=datetime.time(int(record["time_hour"]), int(record["time_minute"])),
            title=title,
            message=record.get("message") or "",
            is_active=_from_flag(record.get("is_active"), True),
            settings=settings_from_record(record),
            created_at=millis_to_datetime(record["created_at"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.exception("Failed to decode shift alarm record %r", record.get("id"))
        raise RecordError(f"Invalid shift alarm record: {e}") from e


def basic_alarm_to_record(alarm: BasicAlarm) -> BasicAlarmRecord:
    return {
        "id": alarm.id,
        "label": alarm.label,
        "time_hour": alarm.time.hour,
        "time_minute": alarm.time.minute,
        "repeat_days": ",".join(str(day) for day in sorted(alarm.repeat_days)),
        "is_active": _to_flag(alarm.is_active),
        "tone": alarm.tone.value,
        "volume": alarm.volume,
        "created_at": datetime_to_millis(alarm.created_at),
        "alarm_type": alarm.alarm_type.value,
        "scheduled_date": date_to_millis(alarm.scheduled_date) if alarm.scheduled_date else None,
    }


def basic_alarm_from_record(record: Mapping[str, Any]) -> BasicAlarm:
    """
    Build a BasicAlarm from a stored record.

    Raises:
        RecordError: If required fields are missing or invalid
    """
    _require_mapping(record, "basic alarm")
    try:
        scheduled = record.get("scheduled_date")
        return BasicAlarm(
            id=record["id"],
            label=record.get("label") or DEFAULT_BASIC_LABEL,
            time=datetime.time(int(record["time_hour"]), int(record["time_minute"])),
            repeat_days=frozenset(int(day) for day in _split_codes(record.get("repeat_days"))),
            is_active=_from_flag(record.get("is_active"), True),
            tone=tone_from_code(record.get("tone")),
            volume=float(record.get("volume", DEFAULT_VOLUME)),
            created_at=millis_to_datetime(record["created_at"]),
            alarm_type=alarm_type_from_code(record.get("alarm_type"), AlarmType.BASIC),
            scheduled_date=millis_to_date(scheduled) if scheduled is not None else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.exception("Failed to decode basic alarm record %r", record.get("id"))
        raise RecordError(f"Invalid basic alarm record: {e}") from e
