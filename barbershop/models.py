# barbershop/models.py

import uuid
from typing import Optional, List
from datetime import datetime, date as Date

from sqlalchemy import Index, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column

from .core import utcnow


def _new_id() -> str:
    return uuid.uuid4().hex


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    phone: str = Field(index=True, unique=True)
    name: str = ""
    password_hash: str
    role: str = "client"  # client or admin
    created_at: datetime = Field(default_factory=utcnow)


class Service(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str
    description: str = ""
    duration: int  # minutes
    price: float
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


_ACTIVE = "status IN ('pending', 'confirmed')"


class Reservation(SQLModel, table=True):
    __table_args__ = (
        Index("ix_reservation_barber_date", "barber_name", "date"),
        # One live booking per start time; cancelled/completed rows are history.
        Index(
            "uq_reservation_active_start",
            "barber_name",
            "date",
            "start_time",
            unique=True,
            sqlite_where=text(_ACTIVE),
            postgresql_where=text(_ACTIVE),
        ),
    )

    id: str = Field(default_factory=_new_id, primary_key=True)

    client_id: int = Field(index=True)
    client_name: str = ""
    client_phone: str = ""

    barber_name: str
    date: Date
    start_time: str  # "HH:MM"
    end_time: str

    # [{"service_id", "service_name", "duration", "price"}, ...]
    services: List[dict] = Field(sa_column=Column(JSON, nullable=False))
    total_duration: int
    total_price: float

    status: str = Field(default="pending", index=True)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class BarberDay(SQLModel, table=True):
    """Lock row for one barber's day.

    Every booking bumps ``version`` before its conflict check, so writers for
    the same barber and date queue on this row until the first one commits.
    """

    __tablename__ = "barber_day"

    barber_name: str = Field(primary_key=True)
    date: Date = Field(primary_key=True)
    version: int = 0
