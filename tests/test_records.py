"""
Tests for the flat record codec used by storage and export.
"""

import datetime
import itertools
import logging
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from shiftcal.core.models import AlarmSettings, AlarmTone, AlarmType, BasicAlarm, ShiftAlarm, ShiftPattern, ShiftType
from shiftcal.core.records import (
    RecordError,
    basic_alarm_from_record,
    basic_alarm_to_record,
    date_to_millis,
    millis_to_date,
    pattern_from_record,
    pattern_to_record,
    settings_from_record,
    shift_alarm_from_record,
    shift_alarm_to_record,
)
from shiftcal.core.utils import UTC


@pytest.fixture
def night_alarm():
    return ShiftAlarm(
        id="alarm-1",
        pattern_id="reference",
        alarm_type=AlarmType.NIGHT,
        target_shift_types=frozenset({ShiftType.NIGHT, ShiftType.DAY}),
        time=datetime.time(18, 30),
        title="Night Shift Alarm",
        message="Get ready for {shift}",
        settings=AlarmSettings(vibration=False, tone=AlarmTone.GENTLE_ACOUSTIC, volume=0.35, snooze_duration=5),
        created_at=datetime.datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=UTC),
    )


class TestDateEncoding:
    def test_utc_midnight(self):
        assert date_to_millis(datetime.date(1970, 1, 2)) == 86_400_000
        assert millis_to_date(86_400_000) == datetime.date(1970, 1, 2)

    def test_local_midnight_keeps_calendar_date(self):
        """Records written at local midnight east or west of UTC round to the same day."""
        utc_midnight = date_to_millis(datetime.date(2024, 1, 5))
        east = utc_midnight - 9 * 3_600_000  # UTC+9
        west = utc_midnight + 5 * 3_600_000  # UTC-5

        assert millis_to_date(east) == datetime.date(2024, 1, 5)
        assert millis_to_date(west) == datetime.date(2024, 1, 5)

    @pytest.mark.parametrize("offset_hours", [12, 6, 0, -6, -11])
    def test_rounding_holds_from_utc_minus_11_to_plus_12(self, offset_hours):
        local_midnight = date_to_millis(datetime.date(2024, 1, 5)) - offset_hours * 3_600_000
        assert millis_to_date(local_midnight) == datetime.date(2024, 1, 5)

    @pytest.mark.parametrize(
        "offset_hours, decoded",
        [(13, datetime.date(2024, 1, 4)), (-12, datetime.date(2024, 1, 6))],
    )
    def test_offsets_beyond_half_a_day_shift_the_date(self, offset_hours, decoded):
        local_midnight = date_to_millis(datetime.date(2024, 1, 5)) - offset_hours * 3_600_000
        assert millis_to_date(local_midnight) == decoded

    def test_dates_before_epoch(self):
        date = datetime.date(1969, 12, 30)
        assert millis_to_date(date_to_millis(date)) == date


class TestPatternRecords:
    def test_round_trip(self, reference_pattern):
        record = pattern_to_record(reference_pattern)
        assert pattern_from_record(record) == reference_pattern

    @pytest.mark.parametrize("length", [1, 2, 6, 28, 90])
    def test_round_trip_cycle_lengths(self, length):
        cycle = tuple(itertools.islice(itertools.cycle([ShiftType.DAY, ShiftType.NIGHT, ShiftType.OFF]), length))
        pattern = ShiftPattern(name=f"Cycle {length}", cycle=cycle, start_date=datetime.date(2023, 11, 20))

        decoded = pattern_from_record(pattern_to_record(pattern))

        assert decoded == pattern
        assert decoded.cycle_duration == length

    def test_round_trip_with_update_timestamp(self, reference_pattern):
        updated = reference_pattern.copy_with(
            is_active=False,
            updated_at=datetime.datetime(2024, 2, 1, 8, 15, 30, 999999, tzinfo=UTC),
        )
        assert pattern_from_record(pattern_to_record(updated)) == updated

    def test_record_layout(self, reference_pattern):
        record = pattern_to_record(reference_pattern)

        assert record["cycle"] == ["day", "day", "night", "night", "off", "off"]
        assert record["is_active"] == 1
        assert record["start_date"] == date_to_millis(datetime.date(2024, 1, 1))
        assert record["updated_at"] is None

    def test_unknown_shift_code_falls_back_to_day(self, reference_pattern, caplog):
        record = pattern_to_record(reference_pattern)
        record["cycle"] = ["night", "swing"]

        with caplog.at_level(logging.WARNING):
            pattern = pattern_from_record(record)

        assert pattern.cycle == (ShiftType.NIGHT, ShiftType.DAY)
        assert "swing" in caplog.text

    def test_missing_field_raises(self, reference_pattern):
        record = pattern_to_record(reference_pattern)
        del record["start_date"]
        with pytest.raises(RecordError):
            pattern_from_record(record)

    def test_empty_cycle_raises(self, reference_pattern):
        record = pattern_to_record(reference_pattern)
        record["cycle"] = []
        with pytest.raises(RecordError):
            pattern_from_record(record)


class TestShiftAlarmRecords:
    def test_round_trip(self, night_alarm):
        assert shift_alarm_from_record(shift_alarm_to_record(night_alarm)) == night_alarm

    @pytest.mark.parametrize(
        "vibration, sound, snooze, volume",
        list(itertools.product([True, False], [True, False], [True, False], [0.0, 0.35, 1.0])),
    )
    def test_round_trip_settings(self, night_alarm, vibration, sound, snooze, volume):
        settings = AlarmSettings(vibration=vibration, sound=sound, snooze=snooze, volume=volume)
        alarm = night_alarm.copy_with(settings=settings)

        assert shift_alarm_from_record(shift_alarm_to_record(alarm)).settings == settings

    def test_settings_flattened(self, night_alarm):
        record = shift_alarm_to_record(night_alarm)

        assert record["target_shift_types"] == "day,night"
        assert record["settings_vibration"] == 0
        assert record["settings_tone"] == "gentle_acoustic"
        assert record["settings_snooze_duration"] == 5
        assert "settings" not in record

    def test_legacy_nested_settings(self, night_alarm):
        record = dict(shift_alarm_to_record(night_alarm))
        for key in [k for k in record if k.startswith("settings_")]:
            del record[key]
        record["settings"] = {"vibration": 0, "tone": "emergency_alarm", "volume": 1.0}

        alarm = shift_alarm_from_record(record)

        assert alarm.settings.vibration is False
        assert alarm.settings.tone == AlarmTone.EMERGENCY_ALARM
        assert alarm.settings.volume == 1.0
        assert alarm.settings.snooze_duration == 10, "Missing settings take their defaults"

    def test_unknown_tone_falls_back(self, night_alarm):
        record = shift_alarm_to_record(night_alarm)
        record["settings_tone"] = "kazoo"
        assert shift_alarm_from_record(record).settings.tone == AlarmTone.WAKEUP_CALL

    def test_missing_alarm_type_is_inferred(self, night_alarm):
        record = shift_alarm_to_record(night_alarm)
        del record["alarm_type"]
        record["target_shift_types"] = "off"
        record["title"] = "Morning"

        assert shift_alarm_from_record(record).alarm_type == AlarmType.OFF

    def test_missing_time_raises(self, night_alarm):
        record = shift_alarm_to_record(night_alarm)
        del record["time_hour"]
        with pytest.raises(RecordError):
            shift_alarm_from_record(record)


class TestSettingsRecords:
    def test_defaults_when_empty(self):
        assert settings_from_record({}) == AlarmSettings()


class TestBasicAlarmRecords:
    def test_round_trip_with_scheduled_date(self):
        alarm = BasicAlarm(
            id="cycle_alarm-1_night_2024-01-03_1830",
            label="Night",
            time=datetime.time(18, 30),
            tone=AlarmTone.FUNNY_ALARM,
            volume=0.5,
            alarm_type=AlarmType.NIGHT,
            scheduled_date=datetime.date(2024, 1, 3),
        )
        assert basic_alarm_from_record(basic_alarm_to_record(alarm)) == alarm

    def test_round_trip_repeating(self):
        alarm = BasicAlarm(label="Gym", time=datetime.time(6, 15), repeat_days=frozenset({1, 3, 5}))
        record = basic_alarm_to_record(alarm)

        assert record["repeat_days"] == "1,3,5"
        assert basic_alarm_from_record(record) == alarm

    def test_missing_label_and_type_defaults(self):
        record = basic_alarm_to_record(BasicAlarm(label="x", time=datetime.time(7, 0)))
        record["label"] = ""
        del record["alarm_type"]

        alarm = basic_alarm_from_record(record)

        assert alarm.label == "Alarm"
        assert alarm.alarm_type == AlarmType.BASIC

    def test_invalid_weekday_raises(self):
        record = basic_alarm_to_record(BasicAlarm(label="x", time=datetime.time(7, 0)))
        record["repeat_days"] = "1,9"
        with pytest.raises(RecordError):
            basic_alarm_from_record(record)


class TestMalformedRecords:
    @pytest.mark.parametrize("record", ["oops", 42, None, ["id", "x"]])
    @pytest.mark.parametrize("decode", [pattern_from_record, shift_alarm_from_record, basic_alarm_from_record])
    def test_non_mapping_raises_record_error(self, decode, record):
        with pytest.raises(RecordError, match="must be an object"):
            decode(record)
