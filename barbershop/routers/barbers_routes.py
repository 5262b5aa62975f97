# barbershop/routers/barbers_routes.py

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from barbershop.catalog import list_services
from barbershop.data import BARBERS
from barbershop.db import get_session
from barbershop.schemas import BarberPublic, ServicePublic

router = APIRouter(
    tags=["barbers"],
)


@router.get("/barbers", response_model=List[BarberPublic])
def barbers():
    return [{"name": name} for name in BARBERS]


@router.get("/services", response_model=List[ServicePublic])
def services(
    include_inactive: bool = Query(False, alias="includeInactive"),
    session: Session = Depends(get_session),
):
    return list_services(session, include_inactive=include_inactive)
