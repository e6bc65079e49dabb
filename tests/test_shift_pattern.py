"""
Unit tests for the shift cycle arithmetic.

Covers date-to-shift mapping in both directions from the anchor, leap days
and year boundaries, forward search and upcoming-shift windows.
"""

import datetime
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from shiftcal.core.cycle import cycle_position, days_between
from shiftcal.core.models import ShiftPattern, ShiftType

D, N, O = ShiftType.DAY, ShiftType.NIGHT, ShiftType.OFF


def make_pattern(cycle, start, **kwargs):
    return ShiftPattern(name="Test Pattern", cycle=tuple(cycle), start_date=start, **kwargs)


class TestShiftForDate:
    """Mapping a calendar date to a shift."""

    def test_reference_cycle_first_six_days(self, reference_pattern):
        """Jan 1-6 resolve to the cycle in order."""
        expected = [D, D, N, N, O, O]
        for offset, shift in enumerate(expected):
            date = datetime.date(2024, 1, 1) + datetime.timedelta(days=offset)
            assert reference_pattern.get_shift_for_date(date) == shift, f"Wrong shift on {date}"

    def test_reference_cycle_restarts(self, reference_pattern):
        assert reference_pattern.get_shift_for_date(datetime.date(2024, 1, 7)) == D
        assert reference_pattern.get_shift_for_date(datetime.date(2024, 1, 9)) == N

    def test_dates_before_start(self):
        """Dates before the anchor count backwards through the cycle."""
        pattern = make_pattern([D, N, O], datetime.date(2024, 1, 5))

        assert pattern.get_shift_for_date(datetime.date(2024, 1, 4)) == O
        assert pattern.get_shift_for_date(datetime.date(2024, 1, 3)) == N
        assert pattern.get_shift_for_date(datetime.date(2024, 1, 2)) == D

    def test_far_before_start(self, reference_pattern):
        """A date many cycles back still lands inside the cycle."""
        date = datetime.date(2024, 1, 1) - datetime.timedelta(days=6 * 1000)
        assert reference_pattern.get_shift_for_date(date) == D
        assert reference_pattern.cycle_position(date - datetime.timedelta(days=1)) == 5

    def test_leap_day(self):
        pattern = make_pattern([D, O], datetime.date(2024, 2, 28))

        assert pattern.get_shift_for_date(datetime.date(2024, 2, 28)) == D
        assert pattern.get_shift_for_date(datetime.date(2024, 2, 29)) == O
        assert pattern.get_shift_for_date(datetime.date(2024, 3, 1)) == D

    def test_year_boundary(self):
        pattern = make_pattern([D, N], datetime.date(2023, 12, 31))

        assert pattern.get_shift_for_date(datetime.date(2023, 12, 31)) == D
        assert pattern.get_shift_for_date(datetime.date(2024, 1, 1)) == N
        assert pattern.get_shift_for_date(datetime.date(2024, 1, 2)) == D

    def test_single_length_cycle(self):
        pattern = make_pattern([N], datetime.date(2024, 1, 1))
        for offset in range(-20, 20):
            date = datetime.date(2024, 1, 1) + datetime.timedelta(days=offset)
            assert pattern.get_shift_for_date(date) == N

    def test_long_cycle_repeats(self):
        cycle = [D if i % 3 == 0 else N if i % 3 == 1 else O for i in range(28)]
        pattern = make_pattern(cycle, datetime.date(2024, 1, 1))

        assert pattern.get_shift_for_date(datetime.date(2024, 1, 1)) == pattern.get_shift_for_date(
            datetime.date(2024, 1, 29)
        )

    @pytest.mark.parametrize("k", [-3, -1, 1, 2, 50])
    def test_periodicity(self, reference_pattern, k):
        for offset in range(12):
            date = datetime.date(2024, 3, 10) + datetime.timedelta(days=offset)
            shifted = date + datetime.timedelta(days=k * reference_pattern.cycle_duration)
            assert reference_pattern.get_shift_for_date(date) == reference_pattern.get_shift_for_date(shifted)

    def test_is_deterministic(self, reference_pattern):
        date = datetime.date(2025, 7, 14)
        results = {reference_pattern.get_shift_for_date(date) for _ in range(5)}
        assert len(results) == 1

    def test_time_of_day_is_ignored(self, reference_pattern):
        """A datetime late in the evening maps to its own calendar day."""
        late = datetime.datetime(2024, 1, 3, 23, 59)
        assert reference_pattern.get_shift_for_date(late) == N


class TestCyclePosition:
    def test_days_between_signed(self):
        assert days_between(datetime.date(2024, 1, 5), datetime.date(2024, 1, 2)) == -3
        assert days_between(datetime.date(2024, 1, 2), datetime.date(2024, 1, 5)) == 3

    def test_position_always_in_range(self):
        start = datetime.date(2024, 1, 1)
        for offset in range(-30, 30):
            position = cycle_position(start, start + datetime.timedelta(days=offset), 7)
            assert 0 <= position < 7

    def test_zero_length_rejected(self):
        with pytest.raises(ValueError):
            cycle_position(datetime.date(2024, 1, 1), datetime.date(2024, 1, 2), 0)


class TestNextShiftDate:
    def test_same_day_when_matching(self, three_day_pattern):
        assert three_day_pattern.get_next_shift_date(D, datetime.date(2024, 1, 1)) == datetime.date(2024, 1, 1)

    def test_later_days(self, three_day_pattern):
        assert three_day_pattern.get_next_shift_date(N, datetime.date(2024, 1, 1)) == datetime.date(2024, 1, 2)
        assert three_day_pattern.get_next_shift_date(O, datetime.date(2024, 1, 1)) == datetime.date(2024, 1, 3)

    def test_missing_shift_returns_none(self):
        pattern = make_pattern([D, N], datetime.date(2024, 1, 1))
        assert pattern.get_next_shift_date(O, datetime.date(2024, 1, 1)) is None

    def test_horizon_is_configurable(self):
        """A match beyond the default horizon is found with a longer one."""
        pattern = make_pattern([D] * 89 + [O], datetime.date(2024, 1, 1))

        assert pattern.get_next_shift_date(O, datetime.date(2024, 1, 1)) is None
        assert pattern.get_next_shift_date(O, datetime.date(2024, 1, 1), horizon_days=120) == datetime.date(
            2024, 3, 30
        )

    def test_zero_horizon_finds_nothing(self, three_day_pattern):
        assert three_day_pattern.get_next_shift_date(D, datetime.date(2024, 1, 1), horizon_days=0) is None

    def test_negative_horizon_rejected(self, three_day_pattern):
        with pytest.raises(ValueError):
            three_day_pattern.get_next_shift_date(D, datetime.date(2024, 1, 1), horizon_days=-1)


class TestUpcomingShifts:
    def test_single_target(self, three_day_pattern):
        dates = three_day_pattern.get_upcoming_shifts({D}, 6, today=datetime.date(2024, 1, 1))
        assert dates == [datetime.date(2024, 1, 1), datetime.date(2024, 1, 4)]

    def test_two_targets(self, three_day_pattern):
        dates = three_day_pattern.get_upcoming_shifts({D, N}, 6, today=datetime.date(2024, 1, 1))
        assert len(dates) == 4, f"Expected 4 working days, got {dates}"
        assert dates == sorted(dates)

    def test_zero_days_is_empty(self, three_day_pattern):
        assert three_day_pattern.get_upcoming_shifts({D}, 0, today=datetime.date(2024, 1, 1)) == []

    def test_negative_days_rejected(self, three_day_pattern):
        with pytest.raises(ValueError):
            three_day_pattern.get_upcoming_shifts({D}, -1, today=datetime.date(2024, 1, 1))


class TestPatternValue:
    def test_empty_cycle_rejected(self):
        with pytest.raises(ValidationError):
            make_pattern([], datetime.date(2024, 1, 1))

    def test_copy_with_revalidates(self, reference_pattern):
        with pytest.raises(ValidationError):
            reference_pattern.copy_with(cycle=())

    def test_copy_with_replaces_fields(self, reference_pattern):
        renamed = reference_pattern.copy_with(name="Renamed")

        assert renamed.name == "Renamed"
        assert renamed.id == reference_pattern.id
        assert renamed.cycle == reference_pattern.cycle
        assert reference_pattern.name == "Day-Day-Night-Night-Off-Off", "Source pattern must not change"

    def test_start_date_time_is_stripped(self):
        pattern = make_pattern([D], datetime.datetime(2024, 1, 1, 15, 30))
        assert pattern.start_date == datetime.date(2024, 1, 1)
        assert type(pattern.start_date) is datetime.date

    def test_is_frozen(self, reference_pattern):
        with pytest.raises(ValidationError):
            reference_pattern.name = "Changed"

    def test_str(self, reference_pattern):
        assert str(reference_pattern) == "Day-Day-Night-Night-Off-Off: [D D N N O O] (Active)"

    def test_shift_type_metadata(self):
        assert D.display_name == "Day"
        assert N.short_code == "N"
        assert O.description == "Day off"
