# barbershop/db.py

import logging

from sqlmodel import SQLModel, create_engine, Session, select

from .config import settings
from .data import DEFAULT_SERVICES
from .models import Service, User

logger = logging.getLogger(__name__)

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # required for SQLite + FastAPI
    connect_args["check_same_thread"] = False

# Engine = connection to the database
engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    connect_args=connect_args,
)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session


def seed_catalog(session: Session) -> int:
    """Insert the default services when the catalog is empty."""
    if session.exec(select(Service)).first() is not None:
        return 0
    for name, description, duration, price in DEFAULT_SERVICES:
        session.add(Service(name=name, description=description, duration=duration, price=price))
    session.commit()
    logger.info("Seeded service catalog with %d services", len(DEFAULT_SERVICES))
    return len(DEFAULT_SERVICES)


def ensure_admin(session: Session) -> None:
    if not settings.ADMIN_PHONE or not settings.ADMIN_PASSWORD:
        return
    existing = session.exec(select(User).where(User.phone == settings.ADMIN_PHONE)).first()
    if existing is not None:
        return

    from .auth import hash_password

    session.add(
        User(
            phone=settings.ADMIN_PHONE,
            name=settings.ADMIN_NAME,
            password_hash=hash_password(settings.ADMIN_PASSWORD),
            role="admin",
        )
    )
    session.commit()
    logger.info("Created bootstrap admin account")


def init_db(bind=None) -> None:
    bind = bind or engine
    SQLModel.metadata.create_all(bind)
    with Session(bind) as session:
        if settings.SEED_CATALOG:
            seed_catalog(session)
        ensure_admin(session)
