# shiftcal/core/types.py

"""
Type definitions for stored records and exported data.

Records mirror the persistence layout one to one: flat keys, epoch
milliseconds for dates and timestamps, 1/0 for booleans.
"""

from typing import TypedDict

#: Millisekunder sedan 1970-01-01T00:00Z
EpochMillis = int


class ShiftPatternRecord(TypedDict):
    """Stored form of a ShiftPattern."""

    id: str
    name: str
    cycle: list[str]
    start_date: EpochMillis
    is_active: int
    created_at: EpochMillis
    updated_at: EpochMillis | None


class ShiftAlarmRecord(TypedDict, total=False):
    """Stored form of a ShiftAlarm, with settings flattened to settings_* keys."""

    id: str
    pattern_id: str
    alarm_type: str
    target_shift_types: str
    time_hour: int
    time_minute: int
    title: str
    message: str
    is_active: int
    created_at: EpochMillis
    settings_vibration: int
    settings_sound: int
    settings_tone: str
    settings_volume: float
    settings_snooze: int
    settings_snooze_duration: int
    settings_max_snooze_count: int


class BasicAlarmRecord(TypedDict):
    """Stored form of a BasicAlarm."""

    id: str
    label: str
    time_hour: int
    time_minute: int
    repeat_days: str
    is_active: int
    tone: str
    volume: float
    created_at: EpochMillis
    alarm_type: str
    scheduled_date: EpochMillis | None


class ExportData(TypedDict, total=False):
    """Full data export, as written by the repository and the JSON backup."""

    patterns: list[ShiftPatternRecord]
    alarms: list[ShiftAlarmRecord]
    basic_alarms: list[BasicAlarmRecord]
    active_pattern_id: str | None
    export_timestamp: EpochMillis


class StorageStats(TypedDict):
    """Counts reported by the repository."""

    total_patterns: int
    active_patterns: int
    total_alarms: int
    active_alarms: int
    total_basic_alarms: int
    active_basic_alarms: int
