# barbershop/lifecycle.py

import logging
from datetime import datetime
from typing import Optional

from sqlmodel import Session

from .config import settings
from .core import stamp
from .deps import ensure_can_access, is_admin, owns
from .errors import Forbidden, InvalidTransition
from .models import Reservation
from .sanitize import sanitize_name, sanitize_notes, sanitize_phone
from .schemas import ReservationUpdate

logger = logging.getLogger(__name__)

TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

TERMINAL = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def is_legal(current: str, new: str) -> bool:
    return new in TRANSITIONS.get(current, set())


def check_transition(reservation: Reservation, new_status: str, caller: dict) -> None:
    current = reservation.status
    if not is_legal(current, new_status):
        raise InvalidTransition(f"Cannot move a {current} reservation to {new_status}")

    if is_admin(caller):
        return
    # Clients may only withdraw their own request before staff confirm it.
    if owns(caller, reservation) and current == "pending" and new_status == "cancelled":
        return
    raise Forbidden("Only staff can make this status change")


def transition(
    session: Session,
    reservation: Reservation,
    new_status: str,
    caller: dict,
    now: datetime,
    commit: bool = True,
) -> Reservation:
    check_transition(reservation, new_status, caller)

    previous = reservation.status
    reservation.status = new_status
    reservation.updated_at = stamp(now)
    session.add(reservation)
    if commit:
        session.commit()
        session.refresh(reservation)

    logger.info(
        "Reservation %s -> %s",
        previous,
        new_status,
        extra={"reservation_id": reservation.id, "status": new_status},
    )
    return reservation


def update_status(
    session: Session,
    reservation: Optional[Reservation],
    new_status: str,
    caller: Optional[dict],
    now: datetime,
) -> Reservation:
    reservation = ensure_can_access(caller, reservation)
    return transition(session, reservation, new_status, caller, now)


def update_reservation(
    session: Session,
    reservation: Optional[Reservation],
    changes: ReservationUpdate,
    caller: Optional[dict],
    now: datetime,
) -> Reservation:
    """Apply a client/staff edit.

    Contact details and notes may change while the booking is live. Services,
    barber, date and times are fixed at creation. A status in the same payload
    goes through the state machine; nothing is written if either part fails.
    """
    reservation = ensure_can_access(caller, reservation)

    fields = changes.model_dump(exclude_unset=True, exclude={"status"})
    if fields and reservation.status in TERMINAL:
        raise InvalidTransition(f"A {reservation.status} reservation can no longer be edited")

    if changes.status is not None and changes.status.value != reservation.status:
        check_transition(reservation, changes.status.value, caller)

    if "notes" in fields:
        reservation.notes = sanitize_notes(fields["notes"], settings.MAX_NOTES_LENGTH)
    if fields.get("client_name") is not None:
        reservation.client_name = sanitize_name(fields["client_name"])
    if fields.get("client_phone") is not None:
        reservation.client_phone = sanitize_phone(fields["client_phone"])

    if changes.status is not None and changes.status.value != reservation.status:
        transition(session, reservation, changes.status.value, caller, now, commit=False)

    reservation.updated_at = stamp(now)
    session.add(reservation)
    session.commit()
    session.refresh(reservation)
    return reservation
