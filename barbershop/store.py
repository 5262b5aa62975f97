# barbershop/store.py

"""Reservation queries and the write locks that serialize bookings."""

import threading
from contextlib import contextmanager
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from .data import ACTIVE_STATUSES
from .models import BarberDay, Reservation

_registry_lock = threading.Lock()
# key -> [lock, number of threads holding or waiting on it]
_day_locks: dict[tuple[str, date], list] = {}

_UPSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}

@contextmanager
def barber_day_lock(barber_name: str, day: date):
    """Serialize bookings for one barber's day inside this process.

    Entries are dropped once nobody holds or waits on them. Other processes are
    kept out by ``lock_barber_day``.
    """
    key = (barber_name, day)
    with _registry_lock:
        entry = _day_locks.setdefault(key, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _registry_lock:
            entry[1] -= 1
            if entry[1] == 0:
                del _day_locks[key]

def lock_barber_day(session: Session, barber_name: str, day: date) -> None:
    """Take the database write lock for one barber's day.

    Must run before the conflict check reads the day. On SQLite the
    write takes the database's RESERVED lock, on PostgreSQL a row lock; either
    is held until the session commits or rolls back.
    """
    upsert = _UPSERTS.get(session.get_bind().dialect.name)
    connection = session.connection()
    if upsert is not None:
        table = BarberDay.__table__
        stmt = upsert(table).values(barber_name=barber_name, date=day, version=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=["barber_name", "date"],
            set_={"version": table.c.version + 1},
        )
        connection.execute(stmt)
        return

    result = connection.execute(
        update(BarberDay)
        .where(BarberDay.barber_name == barber_name)
        .where(BarberDay.date == day)
        .values(version=BarberDay.version + 1)
    )
    if result.rowcount == 0:
        connection.execute(BarberDay.__table__.insert().values(barber_name=barber_name, date=day, version=1))

def active_for_day(session: Session, barber_name: str, day: date) -> list[Reservation]:
    stmt = (
        select(Reservation)
        .where(Reservation.barber_name == barber_name)
        .where(Reservation.date == day)
        .where(Reservation.status.in_(ACTIVE_STATUSES))
    )
    return list(session.exec(stmt).all())

def list_reservations(
    session: Session,
    barber_name: Optional[str] = None,
    client_id: Optional[int] = None,
    on_date: Optional[date] = None,
    statuses: Optional[Iterable[str]] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[Reservation]:
    stmt = select(Reservation)

    if barber_name is not None:
        stmt = stmt.where(Reservation.barber_name == barber_name)
    if client_id is not None:
        stmt = stmt.where(Reservation.client_id == client_id)
    if on_date is not None:
        stmt = stmt.where(Reservation.date == on_date)
    if date_from is not None:
        stmt = stmt.where(Reservation.date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Reservation.date <= date_to)
    if statuses:
        stmt = stmt.where(Reservation.status.in_(list(statuses)))

    stmt = stmt.order_by(Reservation.date, Reservation.start_time)
    return list(session.exec(stmt).all())

def get_reservation(session: Session, reservation_id: str) -> Optional[Reservation]:
    return session.get(Reservation, reservation_id)
