# barbershop/deps.py

"""Authorization gate: every role/ownership decision goes through here."""

import logging
from datetime import datetime
from typing import Optional

from .core import shop_now
from .errors import Forbidden, ReservationNotFound, Unauthenticated
from .models import Reservation

logger = logging.getLogger(__name__)


def get_now() -> datetime:
    # Overridden in tests to pin the clock.
    return shop_now()


def is_admin(user: Optional[dict]) -> bool:
    return user is not None and user.get("role") == "admin"


def require_user(user: Optional[dict]) -> dict:
    if user is None:
        raise Unauthenticated()
    return user


def require_role(user: Optional[dict], role: str) -> None:
    require_user(user)
    if user["role"] != role:
        logger.warning("Role %s required, caller %s is %s", role, user["id"], user["role"])
        raise Forbidden()


def owns(user: dict, reservation: Reservation) -> bool:
    return reservation.client_id == user["id"]


def ensure_can_access(user: Optional[dict], reservation: Optional[Reservation]) -> Reservation:
    """Admins see everything; clients only their own reservations.

    A client asking for a missing or foreign reservation gets the same answer,
    so the response does not reveal whether the id exists.
    """
    user = require_user(user)
    if is_admin(user):
        if reservation is None:
            raise ReservationNotFound()
        return reservation
    if reservation is None or not owns(user, reservation):
        logger.warning("Client %s denied access to reservation", user["id"])
        raise Forbidden("Not authorized to access this reservation")
    return reservation


def scope_client_id(user: Optional[dict], requested: Optional[int]) -> Optional[int]:
    """Client id filter to apply to a listing; clients are pinned to themselves."""
    user = require_user(user)
    if is_admin(user):
        return requested
    return user["id"]
