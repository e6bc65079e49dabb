"""
Domain models for shift patterns and alarms.

All entities are frozen pydantic models. Changing a pattern or alarm means
building a new value with ``copy_with``, which validates the result again.
"""

import datetime
import enum
import uuid
from collections.abc import Iterable
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shiftcal.core.config import NEXT_SHIFT_SEARCH_DAYS
from shiftcal.core.constants import (
    DEFAULT_MAX_SNOOZE_COUNT,
    DEFAULT_SNOOZE_MINUTES,
    DEFAULT_VOLUME,
    ISO_WEEKDAYS,
    WEEKDAY_NAMES,
    WEEKEND_NUMBERS,
    WORKDAY_NUMBERS,
)
from shiftcal.core.cycle import (
    collect_shift_dates,
    cycle_position,
    determine_shift_for_date,
    find_next_shift_date,
)
from shiftcal.core.utils import UTC, get_today, to_date, truncate_to_millis, utc_now


class ShiftType(str, enum.Enum):
    """Label a pattern assigns to a single calendar day."""

    DAY = "day"
    NIGHT = "night"
    OFF = "off"

    @property
    def display_name(self) -> str:
        return SHIFT_TYPE_INFO[self][0]

    @property
    def short_code(self) -> str:
        return SHIFT_TYPE_INFO[self][1]

    @property
    def description(self) -> str:
        return SHIFT_TYPE_INFO[self][2]

    def __str__(self) -> str:
        return self.display_name


#: ShiftType -> (display name, short code, description)
SHIFT_TYPE_INFO: dict[ShiftType, tuple[str, str, str]] = {
    ShiftType.DAY: ("Day", "D", "Working day shift"),
    ShiftType.NIGHT: ("Night", "N", "Working night shift"),
    ShiftType.OFF: ("Off", "O", "Day off"),
}


class AlarmType(str, enum.Enum):
    """Classification tag shared by shift alarms and basic alarms."""

    DAY = "day"
    NIGHT = "night"
    OFF = "off"
    BASIC = "basic"

    @property
    def display_name(self) -> str:
        return ALARM_TYPE_NAMES[self]

    @classmethod
    def for_shift(cls, shift: ShiftType) -> "AlarmType":
        return cls(shift.value)

    def matches(self, shift: ShiftType) -> bool:
        """Basic alarms match every shift, the others only their own."""
        return self is AlarmType.BASIC or self.value == shift.value


ALARM_TYPE_NAMES: dict[AlarmType, str] = {
    AlarmType.DAY: "Day Shift",
    AlarmType.NIGHT: "Night Shift",
    AlarmType.OFF: "Day Off",
    AlarmType.BASIC: "Basic Alarm",
}


class AlarmTone(str, enum.Enum):
    """Bundled alarm sounds. The value is the sound file stem."""

    ANNOYING_ALARM = "anoyingalarm"
    CINEMATIC_EPIC_TRAILER = "cinematic_epic_trailer"
    EMERGENCY_ALARM = "emergency_alarm"
    FIREFIGHTER_ALARM = "firefighteralarm"
    FUNNY_ALARM = "funny_alarm"
    GENTLE_ACOUSTIC = "gentle_acoustic"
    WAKEUP_CALL = "wakeupcall"

    @property
    def display_name(self) -> str:
        return ALARM_TONE_NAMES[self]

    @property
    def sound_path(self) -> str:
        return f"sounds/{self.value}.mp3"


ALARM_TONE_NAMES: dict[AlarmTone, str] = {
    AlarmTone.ANNOYING_ALARM: "Annoying Alarm",
    AlarmTone.CINEMATIC_EPIC_TRAILER: "Cinematic Epic Trailer",
    AlarmTone.EMERGENCY_ALARM: "Emergency Alarm",
    AlarmTone.FIREFIGHTER_ALARM: "Firefighter Alarm",
    AlarmTone.FUNNY_ALARM: "Funny Alarm",
    AlarmTone.GENTLE_ACOUSTIC: "Gentle Acoustic",
    AlarmTone.WAKEUP_CALL: "Wake Up Call",
}

DEFAULT_SHIFT_TYPE = ShiftType.DAY
DEFAULT_TONE = AlarmTone.WAKEUP_CALL


def _new_id() -> str:
    return str(uuid.uuid4())


def _normalize_timestamp(value: datetime.datetime | None) -> datetime.datetime | None:
    # Naiva tidsstämplar tolkas som UTC
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return truncate_to_millis(value.astimezone(UTC))


def _normalize_time_of_day(value: datetime.time) -> datetime.time:
    return value.replace(second=0, microsecond=0, tzinfo=None)


def format_time_of_day(value: datetime.time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def describe_repeat_days(repeat_days: Iterable[int]) -> str:
    """
    Human-readable repeat text for weekday numbers (1=Monday).

    Returns "Once", "Every day", "Weekdays", "Weekends" or a list like "Mon, Wed".
    """
    days = sorted(set(repeat_days))
    if not days:
        return "Once"
    if len(days) == len(ISO_WEEKDAYS):
        return "Every day"
    if set(days) == WORKDAY_NUMBERS:
        return "Weekdays"
    if set(days) == WEEKEND_NUMBERS:
        return "Weekends"
    return ", ".join(WEEKDAY_NAMES[day - 1] for day in days)


def infer_alarm_type(targets: Iterable[ShiftType], title: str = "") -> AlarmType:
    """
    Guess the alarm type for legacy records that predate the alarm_type field.

    Night wins over day, day over off; anything else becomes a day alarm.
    """
    target_set = set(targets)
    lowered = title.lower()
    if ShiftType.NIGHT in target_set or "night" in lowered:
        return AlarmType.NIGHT
    if ShiftType.DAY in target_set or "day" in lowered:
        return AlarmType.DAY
    if ShiftType.OFF in target_set:
        return AlarmType.OFF
    return AlarmType.DAY


EntityT = TypeVar("EntityT", bound="FrozenModel")


class FrozenModel(BaseModel):
    """Base for immutable domain values."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def copy_with(self: EntityT, **overrides: Any) -> EntityT:
        """Return a new, validated value with the given fields replaced."""
        return type(self).model_validate({**dict(self), **overrides})


class AlarmSettings(FrozenModel):
    """Presentation settings for an alarm."""

    vibration: bool = True
    sound: bool = True
    tone: AlarmTone = DEFAULT_TONE
    volume: float = Field(default=DEFAULT_VOLUME, ge=0.0, le=1.0)
    snooze: bool = True
    snooze_duration: int = Field(default=DEFAULT_SNOOZE_MINUTES, ge=1)
    max_snooze_count: int = Field(default=DEFAULT_MAX_SNOOZE_COUNT, ge=0)

    @property
    def sound_path(self) -> str:
        return self.tone.sound_path


class ShiftPattern(FrozenModel):
    """
    Repeating shift cycle anchored to a start date.

    Position 0 of ``cycle`` falls on ``start_date``; the cycle repeats in both
    directions, so dates before the anchor resolve as well.
    """

    id: str = Field(default_factory=_new_id)
    name: str
    cycle: tuple[ShiftType, ...] = Field(min_length=1)
    start_date: datetime.date
    is_active: bool = True
    created_at: datetime.datetime = Field(default_factory=utc_now)
    updated_at: datetime.datetime | None = None

    @field_validator("start_date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        if isinstance(value, datetime.date):
            return to_date(value)
        return value

    @field_validator("created_at", "updated_at")
    @classmethod
    def _timestamps(cls, value: datetime.datetime | None) -> datetime.datetime | None:
        return _normalize_timestamp(value)

    @property
    def cycle_duration(self) -> int:
        return len(self.cycle)

    def cycle_position(self, date: datetime.date) -> int:
        return cycle_position(self.start_date, date, self.cycle_duration)

    def get_shift_for_date(self, date: datetime.date) -> ShiftType:
        """Shift that applies on ``date`` (time of day is ignored)."""
        return determine_shift_for_date(self.cycle, self.start_date, date)

    def get_next_shift_date(
        self,
        target_shift: ShiftType,
        from_date: datetime.date | None = None,
        horizon_days: int = NEXT_SHIFT_SEARCH_DAYS,
    ) -> datetime.date | None:
        """
        First date on or after ``from_date`` with ``target_shift``.

        Args:
            target_shift: Shift to look for
            from_date: First day to check, defaults to today
            horizon_days: Number of days to scan before giving up

        Returns:
            The matching date, or None if nothing matched within the horizon
        """
        start = get_today() if from_date is None else from_date
        return find_next_shift_date(self.cycle, self.start_date, target_shift, start, horizon_days)

    def get_upcoming_shifts(
        self,
        target_shifts: Iterable[ShiftType],
        days_ahead: int,
        today: datetime.date | None = None,
    ) -> list[datetime.date]:
        """
        Dates within ``days_ahead`` days from today whose shift is in ``target_shifts``.

        Raises:
            ValueError: If days_ahead is negative
        """
        first = get_today() if today is None else today
        return collect_shift_dates(self.cycle, self.start_date, frozenset(target_shifts), first, days_ahead)

    def __str__(self) -> str:
        cycle_str = " ".join(shift.short_code for shift in self.cycle)
        status = "Active" if self.is_active else "Inactive"
        return f"{self.name}: [{cycle_str}] ({status})"


class ShiftAlarm(FrozenModel):
    """Alarm that fires at a fixed time on days whose shift is in the target set."""

    id: str = Field(default_factory=_new_id)
    pattern_id: str
    alarm_type: AlarmType
    target_shift_types: frozenset[ShiftType] = Field(min_length=1)
    time: datetime.time
    title: str
    message: str = ""
    is_active: bool = True
    settings: AlarmSettings = Field(default_factory=AlarmSettings)
    created_at: datetime.datetime = Field(default_factory=utc_now)

    @model_validator(mode="before")
    @classmethod
    def _default_alarm_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("alarm_type") is None:
            targets = [ShiftType(t) for t in data.get("target_shift_types") or ()]
            data = {**data, "alarm_type": infer_alarm_type(targets, data.get("title") or "")}
        return data

    @field_validator("time")
    @classmethod
    def _time_of_day(cls, value: datetime.time) -> datetime.time:
        return _normalize_time_of_day(value)

    @field_validator("created_at")
    @classmethod
    def _timestamps(cls, value: datetime.datetime) -> datetime.datetime:
        return _normalize_timestamp(value)

    @property
    def target_shift_types_display(self) -> str:
        if len(self.target_shift_types) == len(ShiftType):
            return "All shifts"
        return ", ".join(shift.display_name for shift in ShiftType if shift in self.target_shift_types)

    def fires_on(self, shift: ShiftType) -> bool:
        return shift in self.target_shift_types

    def __str__(self) -> str:
        return f"{self.title} at {format_time_of_day(self.time)} for {self.target_shift_types_display}"


class BasicAlarm(FrozenModel):
    """
    Shift-independent alarm, one-time or repeating on weekdays.

    ``repeat_days`` uses 1=Monday ... 7=Sunday; an empty set means one-time.
    ``scheduled_date`` pins a one-time alarm to a specific day, which is how
    alarms generated from a shift cycle are stored.
    """

    id: str = Field(default_factory=_new_id)
    label: str
    time: datetime.time
    repeat_days: frozenset[int] = frozenset()
    is_active: bool = True
    tone: AlarmTone = DEFAULT_TONE
    volume: float = Field(default=DEFAULT_VOLUME, ge=0.0, le=1.0)
    created_at: datetime.datetime = Field(default_factory=utc_now)
    alarm_type: AlarmType = AlarmType.BASIC
    scheduled_date: datetime.date | None = None

    @field_validator("repeat_days")
    @classmethod
    def _weekday_numbers(cls, value: frozenset[int]) -> frozenset[int]:
        invalid = sorted(day for day in value if day not in ISO_WEEKDAYS)
        if invalid:
            raise ValueError(f"repeat_days must be within 1-7, got {invalid}")
        return value

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        if isinstance(value, datetime.date):
            return to_date(value)
        return value

    @field_validator("time")
    @classmethod
    def _time_of_day(cls, value: datetime.time) -> datetime.time:
        return _normalize_time_of_day(value)

    @field_validator("created_at")
    @classmethod
    def _timestamps(cls, value: datetime.datetime) -> datetime.datetime:
        return _normalize_timestamp(value)

    @property
    def is_one_time(self) -> bool:
        return not self.repeat_days

    @property
    def repeat_days_display(self) -> str:
        return describe_repeat_days(self.repeat_days)

    def __str__(self) -> str:
        return f"{self.label} at {format_time_of_day(self.time)} - {self.repeat_days_display}"


class DayPreview(FrozenModel):
    """One day of the upcoming-shift preview."""

    date: datetime.date
    shift_type: ShiftType
    weekday_name: str
    date_display: str
    is_today: bool


class ScheduledNotification(FrozenModel):
    """A concrete alarm instance handed to the notification platform."""

    id: int
    alarm_id: str
    pattern_id: str | None = None
    scheduled_time: datetime.datetime
    title: str
    message: str
    shift_type: ShiftType | None = None
    settings: AlarmSettings = Field(default_factory=AlarmSettings)
    repeats_weekly: bool = False


class ResyncPlan(FrozenModel):
    """Difference between what is scheduled on the platform and what should be."""

    to_schedule: tuple[ScheduledNotification, ...] = ()
    to_cancel: frozenset[int] = frozenset()
    orphaned_alarm_ids: frozenset[str] = frozenset()
