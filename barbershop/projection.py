# barbershop/projection.py

"""Calendar projection.

Every grid the booking page or the staff dashboard shows is computed here from
a list of reservations and the current time. Nothing is cached: callers fetch
the reservations again and re-run the projection whenever they want a fresh
view.
"""

from datetime import date, datetime, timedelta
from typing import Iterable

from .core import format_hhmm, is_past_slot, to_minutes
from .data import shop_settings
from .models import Reservation
from .schemas import DayCalendar, ReservationStats, SlotCell, WeekCalendar

# Higher wins when several reservations share a start time.
_OCCUPANCY_RANK = {"pending": 2, "confirmed": 2, "completed": 1}


def working_hours() -> list[str]:
    start = to_minutes(shop_settings["open_time"])
    close = to_minutes(shop_settings["close_time"])
    step = shop_settings["slot_minutes"]
    return [format_hhmm(m) for m in range(start, close - step + 1, step)]


def week_days(day: date) -> list[date]:
    """Open days of the Monday-based week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return [monday + timedelta(days=offset) for offset in shop_settings["working_days"]]


def _index(reservations: Iterable[Reservation]) -> dict:
    occupants = {}
    for r in reservations:
        rank = _OCCUPANCY_RANK.get(r.status)
        if rank is None:
            # cancelled: kept for history, never occupies a cell
            continue
        key = (r.barber_name, r.date, r.start_time)
        current = occupants.get(key)
        if current is None or rank > _OCCUPANCY_RANK[current.status]:
            occupants[key] = r
    return occupants


def _cell(occupants: dict, barber_name: str, day: date, start_time: str, now: datetime) -> SlotCell:
    occupant = occupants.get((barber_name, day, start_time))

    if occupant is None:
        status = "past" if is_past_slot(day, start_time, now) else "available"
        reservation_id = None
    else:
        status = occupant.status
        reservation_id = occupant.id

    return SlotCell(
        barber_name=barber_name,
        date=day,
        start_time=start_time,
        status=status,
        is_available=status == "available",
        reservation_id=reservation_id,
    )


def project_cell(
    reservations: Iterable[Reservation],
    barber_name: str,
    day: date,
    start_time: str,
    now: datetime,
) -> SlotCell:
    return _cell(_index(reservations), barber_name, day, start_time, now)


def project_day(
    reservations: Iterable[Reservation],
    barber_name: str,
    day: date,
    now: datetime,
    hours: list[str] | None = None,
) -> DayCalendar:
    occupants = _index(reservations)
    slots = [_cell(occupants, barber_name, day, h, now) for h in hours or working_hours()]
    return DayCalendar(barber_name=barber_name, date=day, slots=slots)


def project_week(
    reservations: Iterable[Reservation],
    barber_names: Iterable[str],
    day: date,
    now: datetime,
) -> WeekCalendar:
    occupants = _index(reservations)
    hours = working_hours()
    days = week_days(day)

    schedule = []
    for barber_name in barber_names:
        for d in days:
            slots = [_cell(occupants, barber_name, d, h, now) for h in hours]
            schedule.append(DayCalendar(barber_name=barber_name, date=d, slots=slots))

    monday = day - timedelta(days=day.weekday())
    return WeekCalendar(week_start=monday, days=days, schedule=schedule)


def reservation_stats(reservations: Iterable[Reservation], today: date) -> ReservationStats:
    stats = ReservationStats()
    for r in reservations:
        stats.total += 1
        setattr(stats, r.status, getattr(stats, r.status) + 1)
        if r.status == "completed":
            stats.total_spent += r.total_price
        if r.status in ("pending", "confirmed") and r.date >= today:
            stats.upcoming += 1
    return stats
