# shiftcal/core/utils.py
import datetime
from collections.abc import Callable

#: En klocka är allt som kan ge dagens lokala datum.
Clock = Callable[[], datetime.date]

UTC = datetime.timezone.utc
EPOCH = datetime.datetime(1970, 1, 1, tzinfo=UTC)
EPOCH_DATE = datetime.date(1970, 1, 1)


def get_today() -> datetime.date:
    """Dagens lokala datum (systemklockan)."""
    return datetime.date.today()


def get_now() -> datetime.datetime:
    """Aktuell lokal tid utan tidszon, samma tolkning som larmens klockslag."""
    return datetime.datetime.now().replace(second=0, microsecond=0)


def utc_now() -> datetime.datetime:
    """UTC-tidsstämpel med millisekundprecision, för created_at/updated_at."""
    return truncate_to_millis(datetime.datetime.now(UTC))


def to_date(value: datetime.date | datetime.datetime) -> datetime.date:
    """
    Tar bort klockslaget från ett datum.

    datetime är en subklass av date, så den måste kontrolleras först.
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def truncate_to_millis(value: datetime.datetime) -> datetime.datetime:
    """Kapar mikrosekunder till hela millisekunder så att epoch-ms går runt exakt."""
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


def date_range(start: datetime.date, days: int) -> list[datetime.date]:
    """Returnerar `days` på varandra följande datum med början på `start`."""
    return [start + datetime.timedelta(days=offset) for offset in range(days)]
