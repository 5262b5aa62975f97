# barbershop/routers/reservations_routes.py

import logging
from datetime import datetime, date
from typing import Optional, List

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from barbershop.auth import get_current_user
from barbershop.availability import create_reservation
from barbershop.db import get_session
from barbershop.deps import ensure_can_access, get_now, require_role, scope_client_id
from barbershop.lifecycle import update_reservation, update_status
from barbershop.projection import reservation_stats
from barbershop.schemas import (
    ReservationCreate,
    ReservationPublic,
    ReservationStats,
    ReservationStatus,
    ReservationUpdate,
    StatusUpdate,
)
from barbershop.store import get_reservation, list_reservations

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reservations",
    tags=["reservations"],
)


@router.post("", response_model=ReservationPublic, status_code=201)
@router.post("/create", response_model=ReservationPublic, status_code=201, include_in_schema=False)
def create(
    payload: ReservationCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    return create_reservation(session, payload, current_user, now)


@router.get("", response_model=List[ReservationPublic])
def list_all(
    barber_name: Optional[str] = Query(None, alias="barberName"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    on_date: Optional[date] = Query(None, alias="date"),
    status: Optional[List[ReservationStatus]] = Query(None),
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    # Non-admins only ever see their own reservations, whatever they ask for.
    client_id = scope_client_id(current_user, client_id)
    return list_reservations(
        session,
        barber_name=barber_name,
        client_id=client_id,
        on_date=on_date,
        statuses=[s.value for s in status] if status else None,
    )


@router.get("/stats", response_model=ReservationStats)
def stats(
    barber_name: Optional[str] = Query(None, alias="barberName"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    client_id = scope_client_id(current_user, client_id)
    reservations = list_reservations(session, barber_name=barber_name, client_id=client_id)
    return reservation_stats(reservations, now.date())


@router.get("/{reservation_id}", response_model=ReservationPublic)
def get_one(
    reservation_id: str,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return ensure_can_access(current_user, get_reservation(session, reservation_id))


@router.put("/{reservation_id}", response_model=ReservationPublic)
def edit(
    reservation_id: str,
    changes: ReservationUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    target = get_reservation(session, reservation_id)
    return update_reservation(session, target, changes, current_user, now)


@router.patch("/{reservation_id}/status", response_model=ReservationPublic)
def change_status(
    reservation_id: str,
    body: StatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    target = get_reservation(session, reservation_id)
    return update_status(session, target, body.status.value, current_user, now)


@router.patch("/{reservation_id}/cancel", response_model=ReservationPublic)
def cancel(
    reservation_id: str,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    target = get_reservation(session, reservation_id)
    return update_status(session, target, ReservationStatus.cancelled.value, current_user, now)


@router.delete("/{reservation_id}")
def delete(
    reservation_id: str,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    target = ensure_can_access(current_user, get_reservation(session, reservation_id))

    session.delete(target)
    session.commit()
    logger.info("Reservation deleted", extra={"reservation_id": reservation_id})
    return {"message": "Reservation deleted"}
