"""Grundläggande cykelaritmetik och skiftbestämning."""

import datetime
from collections.abc import Collection, Sequence
from typing import TYPE_CHECKING, TypeVar

from shiftcal.core.utils import to_date

if TYPE_CHECKING:
    from shiftcal.core.models import ShiftType

T = TypeVar("T")


def days_between(start: datetime.date, end: datetime.date) -> int:
    """
    Antal hela dygn från start till end, med tecken.

    Klockslag ignoreras på båda sidor, så två tider samma kalenderdag ger 0.
    """
    return (to_date(end) - to_date(start)).days


def cycle_position(start_date: datetime.date, date: datetime.date, cycle_length: int) -> int:
    """
    Index i cykeln för ett datum.

    Args:
        start_date: Datum som motsvarar position 0
        date: Datum att kontrollera (får ligga före start_date)
        cycle_length: Cykelns längd, minst 1

    Returns:
        Position i intervallet [0, cycle_length)
    """
    if cycle_length < 1:
        raise ValueError(f"cycle_length must be >= 1, got {cycle_length}")

    days_since_start = days_between(start_date, date)
    position = days_since_start % cycle_length
    # Pythons % är redan icke-negativ för positiv divisor, men invarianten gäller oavsett
    if position < 0:
        position += cycle_length
    return position


def determine_shift_for_date(cycle: Sequence[T], start_date: datetime.date, date: datetime.date) -> T:
    """
    Bestämmer skift för ett datum utifrån cykel och startdatum.

    Args:
        cycle: Skiftsekvensen, position 0 på start_date
        start_date: Cykelns ankare
        date: Datum att kontrollera

    Returns:
        Skiftet på given position i cykeln
    """
    return cycle[cycle_position(start_date, date, len(cycle))]


def find_next_shift_date(
    cycle: Sequence["ShiftType"],
    start_date: datetime.date,
    target: "ShiftType",
    from_date: datetime.date,
    horizon_days: int,
) -> datetime.date | None:
    """
    Letar framåt efter nästa dag med target-skiftet, från och med from_date.

    Sökningen är begränsad till horizon_days dagar så att den alltid
    terminerar. Ingen träff är ett normalt utfall och ger None.
    """
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be >= 0, got {horizon_days}")

    first = to_date(from_date)
    for offset in range(horizon_days):
        check_date = first + datetime.timedelta(days=offset)
        if determine_shift_for_date(cycle, start_date, check_date) == target:
            return check_date
    return None


def collect_shift_dates(
    cycle: Sequence["ShiftType"],
    start_date: datetime.date,
    targets: Collection["ShiftType"],
    first_date: datetime.date,
    days_ahead: int,
) -> list[datetime.date]:
    """
    Samlar alla datum i [first_date, first_date + days_ahead) vars skift finns i targets.

    Returns:
        Datum i stigande ordning
    """
    if days_ahead < 0:
        raise ValueError(f"days_ahead must be >= 0, got {days_ahead}")

    first = to_date(first_date)
    results = []
    for offset in range(days_ahead):
        check_date = first + datetime.timedelta(days=offset)
        if determine_shift_for_date(cycle, start_date, check_date) in targets:
            results.append(check_date)
    return results
