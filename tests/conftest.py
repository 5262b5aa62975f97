"""Shared fixtures: in-memory database, pinned clock, users and an API client."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

from barbershop.auth import create_access_token, identity
from barbershop.db import get_session, init_db
from barbershop.deps import get_now
from barbershop.main import app
from barbershop.models import Service, User

# Wednesday noon; 2025-03-10 is the following Monday.
NOW = datetime(2025, 3, 5, 12, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make(role: str = "client", name: str = "Test Client", phone: str | None = None) -> dict:
        counter["n"] += 1
        phone = phone or f"555-000{counter['n']:04d}"
        user = User(phone=phone, name=name, password_hash="not-used", role=role)
        session.add(user)
        session.commit()
        session.refresh(user)
        return identity(user)

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", name="Staff")


@pytest.fixture
def client_user(make_user):
    return make_user(name="Jane Doe", phone="555-1234567")


@pytest.fixture
def other_client(make_user):
    return make_user(name="Bob Smith", phone="555-7654321")


@pytest.fixture
def service_ids(session):
    """Seeded catalog ids keyed by service name."""
    return {s.name: s.id for s in session.exec(select(Service)).all()}


@pytest.fixture
def api(engine, now):
    def _session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_now] = lambda: now
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user: dict) -> dict:
    token = create_access_token({"sub": user["phone"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers
