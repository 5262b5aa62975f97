# barbershop/catalog.py

"""Read-only access to the service catalog."""

from sqlmodel import Session, select

from .models import Service


def get_services_by_ids(session: Session, ids: list[str]) -> dict[str, Service]:
    """Catalog rows for ``ids``, keyed by id.

    Inactive services are returned too so old reservations can still be shown;
    callers booking new work must check ``is_active`` themselves.
    """
    if not ids:
        return {}
    rows = session.exec(select(Service).where(Service.id.in_(ids))).all()
    return {row.id: row for row in rows}


def list_services(session: Session, include_inactive: bool = False) -> list[Service]:
    stmt = select(Service)
    if not include_inactive:
        stmt = stmt.where(Service.is_active == True)  # noqa: E712
    return list(session.exec(stmt.order_by(Service.name)).all())


def snapshot(service: Service) -> dict:
    return {
        "service_id": service.id,
        "service_name": service.name,
        "duration": service.duration,
        "price": service.price,
    }
