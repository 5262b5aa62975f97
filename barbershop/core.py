# barbershop/core.py

"""Time arithmetic shared by the booking engine and the calendar.

Times of day travel as "HH:MM" strings, the same shape they are stored in, and
are turned into minutes since midnight only when compared.
"""

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from .config import settings
from .errors import DegenerateTimeRange

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_minutes(value) -> int:
    """Minutes since midnight for an "HH:MM" string or a ``time``."""
    if isinstance(value, str):
        value = parse_hhmm(value)
    return value.hour * 60 + value.minute


def combine(day: date, start_time: str) -> datetime:
    return datetime.combine(day, parse_hhmm(start_time))


def compute_end_time(start_time: str, total_duration_minutes: int) -> str:
    """End of a booking that starts at ``start_time``.

    Never wraps around midnight: a booking ending after 23:59 is rejected.
    """
    end = to_minutes(start_time) + total_duration_minutes
    if end >= MINUTES_PER_DAY:
        raise DegenerateTimeRange("Reservation cannot run past midnight")
    return format_hhmm(end)


def _comparable(value):
    if isinstance(value, (str, time)):
        return to_minutes(value)
    return value


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    """Half-open interval overlap; touching endpoints do not overlap."""
    start_a, end_a, start_b, end_b = (
        _comparable(v) for v in (start_a, end_a, start_b, end_b)
    )
    return start_a < end_b and start_b < end_a


def is_past_slot(day: date, start_time: str, now: datetime) -> bool:
    today = now.date()
    if day < today:
        return True
    if day > today:
        return False
    return combine(day, start_time) < now


def shop_now() -> datetime:
    """Current wall-clock time at the shop, as a naive datetime.

    Only used for comparing against "HH:MM" slot times. Anything persisted goes
    through ``stamp`` first.
    """
    return datetime.now(ZoneInfo(settings.SHOP_TIMEZONE)).replace(tzinfo=None)


def stamp(now: datetime) -> datetime:
    """Timezone-aware version of a shop wall-clock ``now``, for storage."""
    if now.tzinfo is None:
        return now.replace(tzinfo=ZoneInfo(settings.SHOP_TIMEZONE))
    return now


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
