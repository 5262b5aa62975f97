# barbershop/routers/calendar_routes.py

from datetime import datetime, date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from barbershop.auth import get_current_user
from barbershop.data import BARBERS
from barbershop.db import get_session
from barbershop.deps import get_now
from barbershop.errors import InvalidBarber
from barbershop.projection import project_day, project_week
from barbershop.schemas import DayCalendar, WeekCalendar
from barbershop.store import list_reservations

router = APIRouter(
    prefix="/calendar",
    tags=["calendar"],
)


def _check_barber(barber_name: str) -> None:
    if barber_name not in BARBERS:
        raise InvalidBarber(f"Unknown barber: {barber_name}")


@router.get("/day", response_model=DayCalendar)
def day_calendar(
    barber_name: str = Query(..., alias="barberName"),
    on_date: date = Query(..., alias="date"),
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    _check_barber(barber_name)
    # Every client's bookings count here; only status and id reach the caller.
    reservations = list_reservations(session, barber_name=barber_name, on_date=on_date)
    return project_day(reservations, barber_name, on_date, now)


@router.get("/week", response_model=WeekCalendar)
def week_calendar(
    on_date: date = Query(..., alias="date"),
    barber_name: Optional[str] = Query(None, alias="barberName"),
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    if barber_name is not None:
        _check_barber(barber_name)
        barbers = [barber_name]
    else:
        barbers = list(BARBERS)

    monday = on_date - timedelta(days=on_date.weekday())
    reservations = list_reservations(
        session,
        barber_name=barber_name,
        date_from=monday,
        date_to=monday + timedelta(days=6),
    )
    return project_week(reservations, barbers, on_date, now)
