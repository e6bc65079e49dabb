import datetime

from fastapi import HTTPException, status

from shiftcal.core.models import ShiftType


def validate_days_ahead(days_ahead: int, name: str = "days_ahead") -> int:
    """
    Säkerställ att en horisont inte är negativ.

    Returnerar värdet om det är giltigt, annars kastas 400.
    """
    if days_ahead < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{name} must be >= 0",
        )
    return days_ahead


def parse_shift_code(code: str) -> ShiftType:
    """Tolkar en enskild skiftkod, okänd kod ger HTTP 400."""
    try:
        return ShiftType(code.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown shift type '{code}'",
        )


def parse_shift_codes(codes: str) -> frozenset[ShiftType]:
    """
    Tolkar kommaseparerade skiftkoder från en query-sträng, t.ex. "day,night".

    Okända eller tomma koder ger HTTP 400. Här används ingen fallback till
    dagskift, till skillnad från avkodningen av sparad data.
    """
    parts = [part.strip().lower() for part in codes.split(",") if part.strip()]
    if not parts:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one shift type is required",
        )
    try:
        return frozenset(ShiftType(part) for part in parts)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown shift type in '{codes}'",
        )


def validate_date_range(start: datetime.date, end: datetime.date) -> tuple[datetime.date, datetime.date]:
    """Start får inte ligga efter slut, annars 400."""
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end must not be before start",
        )
    return start, end
