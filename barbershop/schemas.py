# barbershop/schemas.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from enum import Enum
from datetime import datetime, date
from typing import List, Optional

from .config import settings

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class CamelModel(BaseModel):
    # Wire format is camelCase; snake_case is accepted on input too.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    client = "client"
    admin = "admin"


class ReservationStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class SlotStatus(str, Enum):
    available = "available"
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    past = "past"


class UserPublic(CamelModel):
    id: int
    phone: str
    name: str
    role: UserRole


class UserCreate(CamelModel):
    phone: str = Field(min_length=7, max_length=20)
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=8, max_length=72)


class ServicePublic(CamelModel):
    id: str
    name: str
    description: str
    duration: int
    price: float
    is_active: bool


class BarberPublic(CamelModel):
    name: str


def check_notes_length(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > settings.MAX_NOTES_LENGTH:
        raise ValueError(f"Notes must be at most {settings.MAX_NOTES_LENGTH} characters")
    return value


class ReservationCreate(CamelModel):
    barber_name: str
    date: date
    start_time: str = Field(pattern=HHMM_PATTERN)
    # legacy single-service field, merged with service_ids
    service_id: Optional[str] = None
    service_ids: Optional[List[str]] = None
    notes: Optional[str] = None
    client_name: Optional[str] = Field(default=None, max_length=100)
    client_phone: Optional[str] = Field(default=None, max_length=20)

    notes_fit = field_validator("notes")(check_notes_length)


class ReservationUpdate(CamelModel):
    notes: Optional[str] = None
    client_name: Optional[str] = Field(default=None, max_length=100)
    client_phone: Optional[str] = Field(default=None, max_length=20)
    status: Optional[ReservationStatus] = None

    notes_fit = field_validator("notes")(check_notes_length)


class StatusUpdate(CamelModel):
    status: ReservationStatus


class ReservationServiceDetail(CamelModel):
    service_id: str
    service_name: str
    duration: int
    price: float


class ReservationPublic(CamelModel):
    id: str
    client_id: int
    client_name: str
    client_phone: str
    barber_name: str
    date: date
    start_time: str
    end_time: str
    services: List[ReservationServiceDetail]
    total_duration: int
    total_price: float
    status: ReservationStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ReservationStats(CamelModel):
    total: int = 0
    pending: int = 0
    confirmed: int = 0
    cancelled: int = 0
    completed: int = 0
    total_spent: float = 0
    upcoming: int = 0


class SlotCell(CamelModel):
    barber_name: str
    date: date
    start_time: str
    status: SlotStatus
    is_available: bool
    reservation_id: Optional[str] = None


class DayCalendar(CamelModel):
    barber_name: str
    date: date
    slots: List[SlotCell]


class WeekCalendar(CamelModel):
    week_start: date
    days: List[date]
    schedule: List[DayCalendar]
