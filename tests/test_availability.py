"""Admission rules for new reservations."""

import random
import threading
from contextlib import nullcontext
from datetime import date, datetime

import pytest
from sqlmodel import Session, create_engine

from barbershop import availability, store
from barbershop.availability import create_reservation, requested_service_ids
from barbershop.core import compute_end_time, overlaps, stamp
from barbershop.db import init_db
from barbershop.errors import (
    DegenerateTimeRange,
    InvalidBarber,
    InvalidService,
    MisalignedStart,
    NoServiceSpecified,
    PastDate,
    SlotConflict,
    TooManyServices,
    Unauthenticated,
)
from barbershop.lifecycle import transition
from barbershop.models import BarberDay, Service, User
from barbershop.schemas import ReservationCreate
from barbershop.store import list_reservations

DAY = date(2025, 3, 10)


def booking(service_ids, start_time="10:00", barber_name="John", day=DAY, **extra):
    return ReservationCreate(
        barber_name=barber_name,
        date=day,
        start_time=start_time,
        service_ids=service_ids,
        **extra,
    )


def test_creates_pending_reservation_with_snapshot(session, now, client_user, service_ids):
    haircut = service_ids["Classic Haircut"]

    r = create_reservation(session, booking([haircut]), client_user, now)

    assert r.id
    assert r.status == "pending"
    assert r.start_time == "10:00"
    assert r.end_time == "10:45"
    assert r.total_duration == 45
    assert r.total_price == 35
    assert r.client_id == client_user["id"]
    assert r.client_name == "Jane Doe"
    assert r.client_phone == "555-1234567"
    assert r.services == [
        {"service_id": haircut, "service_name": "Classic Haircut", "duration": 45, "price": 35},
    ]


def test_multiple_services_are_summed_in_order(session, now, client_user, service_ids):
    ids = [service_ids["Beard Trim"], service_ids["Fade"]]

    r = create_reservation(session, booking(ids, start_time="14:00"), client_user, now)

    assert [s["service_name"] for s in r.services] == ["Beard Trim", "Fade"]
    assert r.total_duration == 45
    assert r.total_price == 45
    assert r.end_time == compute_end_time("14:00", 45)


def test_legacy_service_id_is_merged_first():
    request = ReservationCreate(
        barber_name="John",
        date=DAY,
        start_time="10:00",
        service_id="a",
        service_ids=["b", "a", "c"],
    )
    assert requested_service_ids(request) == ["a", "b", "c"]


def test_legacy_service_id_alone(session, now, client_user, service_ids):
    request = ReservationCreate(
        barberName="Mike",
        date=DAY,
        startTime="11:00",
        serviceId=service_ids["Fade"],
    )
    r = create_reservation(session, request, client_user, now)
    assert r.total_duration == 30
    assert r.end_time == "11:30"


def test_caller_supplied_end_time_is_ignored(session, now, client_user, service_ids):
    request = ReservationCreate.model_validate(
        {
            "barberName": "John",
            "date": "2025-03-10",
            "startTime": "10:00",
            "endTime": "17:00",
            "serviceIds": [service_ids["Classic Haircut"]],
        }
    )
    r = create_reservation(session, request, client_user, now)
    assert r.end_time == "10:45"


def test_contact_override_is_sanitized(session, now, client_user, service_ids):
    request = booking(
        [service_ids["Fade"]],
        client_name="Jane <b>Doe</b>",
        client_phone="+1 (555) 123-4567 x",
        notes="<script>alert(1)</script>Please use <i>scissors</i>",
    )
    r = create_reservation(session, request, client_user, now)

    assert r.client_name == "Jane bDoeb"
    assert r.client_phone == "+1 (555) 123-4567"
    assert "script" not in r.notes
    assert "<" not in r.notes
    assert "Please use scissors" in r.notes


def test_start_must_be_on_the_booking_grid(session, now, client_user, service_ids):
    with pytest.raises(MisalignedStart):
        create_reservation(session, booking([service_ids["Fade"]], start_time="10:10"), client_user, now)
    assert list_reservations(session) == []

    r = create_reservation(session, booking([service_ids["Fade"]], start_time="10:15"), client_user, now)
    assert r.end_time == "10:45"


def test_timestamps_are_timezone_aware(session, now, client_user, service_ids):
    assert Service(name="Trim", duration=15, price=10).created_at.tzinfo is not None

    r = create_reservation(session, booking([service_ids["Fade"]]), client_user, now)
    # SQLite hands back the stored wall-clock time without an offset
    assert stamp(r.created_at) == stamp(now)
    assert stamp(r.updated_at) == stamp(now)


def test_unauthenticated_caller_is_rejected(session, now, service_ids):
    with pytest.raises(Unauthenticated):
        create_reservation(session, booking([service_ids["Fade"]]), None, now)


def test_unknown_barber(session, now, client_user, service_ids):
    with pytest.raises(InvalidBarber):
        create_reservation(session, booking([service_ids["Fade"]], barber_name="Zed"), client_user, now)


@pytest.mark.parametrize(
    "request_kwargs",
    [
        {"barber_name": "Zed"},
        {"service_ids": []},
        {"service_ids": ["does-not-exist"]},
        {"start_time": "23:50"},
    ],
)
def test_past_date_wins_over_every_other_problem(session, now, client_user, service_ids, request_kwargs):
    kwargs = {"service_ids": [service_ids["Fade"]], "day": date(2025, 3, 4)}
    kwargs.update(request_kwargs)
    service_list = kwargs.pop("service_ids")

    with pytest.raises(PastDate):
        create_reservation(session, booking(service_list, **kwargs), client_user, now)


def test_elapsed_time_today_is_rejected(session, now, client_user, service_ids):
    with pytest.raises(PastDate):
        create_reservation(
            session, booking([service_ids["Fade"]], day=now.date(), start_time="11:00"), client_user, now
        )
    r = create_reservation(
        session, booking([service_ids["Fade"]], day=now.date(), start_time="15:00"), client_user, now
    )
    assert r.status == "pending"


def test_no_service_specified(session, now, client_user):
    with pytest.raises(NoServiceSpecified):
        create_reservation(session, booking([]), client_user, now)
    with pytest.raises(NoServiceSpecified):
        create_reservation(session, booking(None), client_user, now)


def test_unknown_service(session, now, client_user, service_ids):
    with pytest.raises(InvalidService):
        create_reservation(session, booking([service_ids["Fade"], "nope"]), client_user, now)


def test_inactive_service_cannot_be_booked(session, now, client_user, service_ids):
    shave = session.get(Service, service_ids["Hot Towel Shave"])
    shave.is_active = False
    session.add(shave)
    session.commit()

    with pytest.raises(InvalidService):
        create_reservation(session, booking([shave.id]), client_user, now)


def test_too_many_services(session, now, client_user):
    extra = []
    for i in range(6):
        s = Service(name=f"Extra {i}", duration=5, price=1)
        session.add(s)
        extra.append(s)
    session.commit()

    with pytest.raises(TooManyServices):
        create_reservation(session, booking([s.id for s in extra]), client_user, now)


def test_zero_duration_is_degenerate(session, now, client_user):
    free = Service(name="Consultation", duration=0, price=0)
    session.add(free)
    session.commit()

    with pytest.raises(DegenerateTimeRange):
        create_reservation(session, booking([free.id]), client_user, now)


def test_booking_past_midnight_is_degenerate(session, now, client_user, service_ids):
    with pytest.raises(DegenerateTimeRange):
        create_reservation(
            session, booking([service_ids["Cut and Beard"]], start_time="23:30"), client_user, now
        )


def test_overlap_conflicts_but_back_to_back_succeeds(session, now, client_user, other_client, service_ids):
    haircut = [service_ids["Classic Haircut"]]
    create_reservation(session, booking(haircut, start_time="10:00"), client_user, now)

    with pytest.raises(SlotConflict):
        create_reservation(session, booking(haircut, start_time="10:30"), other_client, now)
    with pytest.raises(SlotConflict):
        create_reservation(session, booking(haircut, start_time="09:30"), other_client, now)

    r = create_reservation(session, booking(haircut, start_time="10:45"), other_client, now)
    assert r.start_time == "10:45"


def test_other_barbers_and_days_do_not_conflict(session, now, client_user, service_ids):
    haircut = [service_ids["Classic Haircut"]]
    create_reservation(session, booking(haircut), client_user, now)

    assert create_reservation(session, booking(haircut, barber_name="Mike"), client_user, now)
    assert create_reservation(session, booking(haircut, day=date(2025, 3, 11)), client_user, now)


def test_cancelled_and_completed_do_not_block(session, now, client_user, admin, service_ids):
    haircut = [service_ids["Classic Haircut"]]
    first = create_reservation(session, booking(haircut), client_user, now)
    transition(session, first, "cancelled", admin, now)

    second = create_reservation(session, booking(haircut), client_user, now)
    transition(session, second, "confirmed", admin, now)
    transition(session, second, "completed", admin, now)

    third = create_reservation(session, booking(haircut), client_user, now)
    assert third.status == "pending"


def test_failed_booking_persists_nothing(session, now, client_user, service_ids):
    with pytest.raises(InvalidService):
        create_reservation(session, booking(["nope"]), client_user, now)
    assert list_reservations(session) == []


def test_random_requests_never_double_book(session, now, client_user, service_ids):
    rng = random.Random(7)
    ids = list(service_ids.values())
    starts = [f"{h:02d}:{m:02d}" for h in range(9, 18) for m in (0, 15, 30, 45)]

    for _ in range(120):
        request = booking(
            rng.sample(ids, rng.randint(1, 2)),
            start_time=rng.choice(starts),
            barber_name=rng.choice(["John", "Mike"]),
        )
        try:
            create_reservation(session, request, client_user, now)
        except SlotConflict:
            pass

    for barber in ("John", "Mike"):
        live = list_reservations(session, barber_name=barber, on_date=DAY, statuses=["pending", "confirmed"])
        assert live
        for i, a in enumerate(live):
            assert a.total_duration == sum(s["duration"] for s in a.services)
            assert a.end_time == compute_end_time(a.start_time, a.total_duration)
            for b in live[i + 1:]:
                assert not overlaps(a.start_time, a.end_time, b.start_time, b.end_time)


@pytest.fixture
def file_db(tmp_path):
    """A file-backed database that separate connections can contend on."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    init_db(engine)

    with Session(engine) as s:
        user = User(phone="555-9999999", name="Racer", password_hash="x")
        service = Service(name="Race Cut", duration=30, price=20)
        s.add(user)
        s.add(service)
        s.commit()
        caller = {"id": user.id, "phone": user.phone, "name": user.name, "role": "client"}
        service_id = service.id

    yield engine, caller, service_id
    engine.dispose()


def race(engine, caller, service_id, workers=8):
    now = datetime(2025, 3, 5, 12, 0)
    results = []
    barrier = threading.Barrier(workers)

    def attempt(start_time):
        barrier.wait()
        with Session(engine) as s:
            try:
                create_reservation(s, booking([service_id], start_time=start_time), caller, now)
                results.append("ok")
            except SlotConflict:
                results.append("conflict")

    # 10:00 and 10:15 overlap for a 30 minute service
    threads = [
        threading.Thread(target=attempt, args=("10:00" if i % 2 else "10:15",)) for i in range(workers)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def test_concurrent_requests_for_one_slot_admit_one(file_db):
    results = race(*file_db)

    assert results.count("ok") == 1
    assert results.count("conflict") == 7


def test_database_lock_alone_admits_one(file_db, monkeypatch):
    # separate worker processes do not share the in-process lock
    monkeypatch.setattr(availability, "barber_day_lock", lambda barber_name, day: nullcontext())
    engine = file_db[0]

    results = race(*file_db)

    assert results.count("ok") == 1
    assert results.count("conflict") == 7
    with Session(engine) as s:
        live = list_reservations(s, barber_name="John", on_date=DAY)
        assert len(live) == 1
        assert s.get(BarberDay, ("John", DAY)).version == 8


def test_day_locks_are_released(session, now, client_user, service_ids):
    create_reservation(session, booking([service_ids["Fade"]]), client_user, now)
    with pytest.raises(SlotConflict):
        create_reservation(session, booking([service_ids["Fade"]], start_time="10:15"), client_user, now)

    assert store._day_locks == {}
