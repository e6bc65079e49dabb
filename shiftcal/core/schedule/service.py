"""Förhandsvisning av aktuellt och kommande skift."""

import datetime

from shiftcal.core.config import PREVIEW_DAYS
from shiftcal.core.constants import WEEKDAY_NAMES
from shiftcal.core.models import DayPreview, ShiftPattern, ShiftType
from shiftcal.core.utils import Clock, date_range, get_today


def format_date_display(date: datetime.date) -> str:
    """Kort datumvisning, till exempel "1/7"."""
    return f"{date.month}/{date.day}"


def build_day_preview(pattern: ShiftPattern, date: datetime.date, today: datetime.date) -> DayPreview:
    return DayPreview(
        date=date,
        shift_type=pattern.get_shift_for_date(date),
        weekday_name=WEEKDAY_NAMES[date.weekday()],
        date_display=format_date_display(date),
        is_today=date == today,
    )


class SchedulingService:
    """
    Dagsbaserade vyer över ett skiftmönster.

    Klockan läses en gång per anrop och skickas sedan vidare, så en
    förhandsvisning som korsar midnatt ser bara ett "idag".
    """

    def __init__(self, clock: Clock = get_today):
        self._clock = clock

    def today(self) -> datetime.date:
        return self._clock()

    def get_current_shift(self, pattern: ShiftPattern) -> ShiftType:
        """Skiftet som gäller idag."""
        return pattern.get_shift_for_date(self.today())

    def get_upcoming_shifts(self, pattern: ShiftPattern, days_ahead: int = PREVIEW_DAYS) -> list[DayPreview]:
        """
        En post per dag i [idag, idag + days_ahead).

        Args:
            pattern: Mönstret att visa
            days_ahead: Antal dagar, 0 ger en tom lista

        Returns:
            Exakt days_ahead poster i stigande datumordning, första markerad som idag

        Raises:
            ValueError: Om days_ahead är negativt
        """
        if days_ahead < 0:
            raise ValueError(f"days_ahead must be >= 0, got {days_ahead}")

        today = self.today()
        return [build_day_preview(pattern, date, today) for date in date_range(today, days_ahead)]
