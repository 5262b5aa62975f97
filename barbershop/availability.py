# barbershop/availability.py

"""Admission of new reservations.

This is the only code path that creates reservations. A request is checked in
a fixed order (date, barber, services, timing) and then, holding the barber's
day lock, against the live bookings of that day. Any failure raises a
``BookingError`` and leaves nothing persisted.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from .catalog import get_services_by_ids, snapshot
from .config import settings
from .core import compute_end_time, is_past_slot, overlaps, stamp, to_minutes
from .data import BARBERS, shop_settings
from .deps import require_user
from .errors import (
    DegenerateTimeRange,
    InvalidBarber,
    InvalidService,
    MisalignedStart,
    NoServiceSpecified,
    PastDate,
    SlotConflict,
    TooManyServices,
)
from .models import Reservation
from .sanitize import sanitize_name, sanitize_notes, sanitize_phone
from .schemas import ReservationCreate
from .store import active_for_day, barber_day_lock, lock_barber_day

logger = logging.getLogger(__name__)


def requested_service_ids(request: ReservationCreate) -> list[str]:
    """Merge the legacy ``service_id`` with ``service_ids``, keeping order."""
    ids = []
    if request.service_id:
        ids.append(request.service_id)
    ids.extend(request.service_ids or [])

    seen = set()
    merged = []
    for service_id in ids:
        if service_id and service_id not in seen:
            seen.add(service_id)
            merged.append(service_id)
    return merged


def resolve_services(session: Session, service_ids: list[str]) -> list[dict]:
    if not service_ids:
        raise NoServiceSpecified()
    if len(service_ids) > settings.MAX_SERVICES_PER_BOOKING:
        raise TooManyServices(
            f"At most {settings.MAX_SERVICES_PER_BOOKING} services can be booked at once"
        )

    found = get_services_by_ids(session, service_ids)
    snapshots = []
    for service_id in service_ids:
        service = found.get(service_id)
        if service is None or not service.is_active:
            raise InvalidService(f"Service not available: {service_id}")
        snapshots.append(snapshot(service))
    return snapshots


def find_conflict(
    existing: list[Reservation],
    start_time: str,
    end_time: str,
) -> Optional[Reservation]:
    for r in existing:
        if overlaps(start_time, end_time, r.start_time, r.end_time):
            return r
    return None


def create_reservation(
    session: Session,
    request: ReservationCreate,
    caller: Optional[dict],
    now: datetime,
) -> Reservation:
    caller = require_user(caller)

    # 1) No bookings in the past
    if request.date < now.date():
        raise PastDate()
    if is_past_slot(request.date, request.start_time, now):
        raise PastDate("That time has already passed")

    # 2) Barber must be one of ours
    if request.barber_name not in BARBERS:
        raise InvalidBarber(f"Unknown barber: {request.barber_name}")

    # 3) Resolve and snapshot services
    services = resolve_services(session, requested_service_ids(request))
    total_duration = sum(s["duration"] for s in services)
    total_price = sum(s["price"] for s in services)

    # 4) Build the interval; end_time from the request is never trusted
    step = shop_settings["booking_step_minutes"]
    if to_minutes(request.start_time) % step != 0:
        raise MisalignedStart(f"Start time must be in {step}-minute increments")

    end_time = compute_end_time(request.start_time, total_duration)
    if to_minutes(end_time) <= to_minutes(request.start_time):
        raise DegenerateTimeRange()

    reservation = Reservation(
        client_id=caller["id"],
        client_name=sanitize_name(request.client_name) or caller.get("name") or "",
        client_phone=sanitize_phone(request.client_phone) or caller.get("phone") or "",
        barber_name=request.barber_name,
        date=request.date,
        start_time=request.start_time,
        end_time=end_time,
        services=services,
        total_duration=total_duration,
        total_price=total_price,
        status="pending",
        notes=sanitize_notes(request.notes, settings.MAX_NOTES_LENGTH),
        created_at=stamp(now),
        updated_at=stamp(now),
    )

    # 5) Check-then-insert holding the barber's day, in this process and in the database
    with barber_day_lock(request.barber_name, request.date):
        try:
            lock_barber_day(session, request.barber_name, request.date)
            existing = active_for_day(session, request.barber_name, request.date)
            conflict = find_conflict(existing, request.start_time, end_time)
            if conflict is None:
                session.add(reservation)
                session.commit()
        except IntegrityError:
            session.rollback()
            raise SlotConflict("Appointment already exists for that start time")

        if conflict is not None:
            session.rollback()
            logger.info(
                "Booking rejected",
                extra={
                    "barber": request.barber_name,
                    "date": request.date,
                    "start_time": request.start_time,
                    "kind": SlotConflict.kind,
                },
            )
            raise SlotConflict(
                f"{request.barber_name} is booked from {conflict.start_time} to {conflict.end_time}"
            )

    session.refresh(reservation)
    logger.info(
        "Reservation created",
        extra={
            "reservation_id": reservation.id,
            "barber": reservation.barber_name,
            "date": reservation.date,
            "start_time": reservation.start_time,
            "status": reservation.status,
        },
    )
    return reservation
