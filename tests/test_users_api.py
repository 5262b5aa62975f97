from barbershop.models import Service


def test_register_login_and_whoami(api):
    res = api.post("/users", json={"phone": "555-0101010", "name": "Sam Lee", "password": "correct-horse"})
    assert res.status_code == 201
    user = res.json()
    assert user["role"] == "client"
    assert user["name"] == "Sam Lee"

    res = api.post("/users", json={"phone": "555-0101010", "name": "Sam Again", "password": "correct-horse"})
    assert res.status_code == 409

    res = api.post("/auth/login", data={"username": "555-0101010", "password": "wrong-password"})
    assert res.status_code == 401

    res = api.post("/auth/login", data={"username": "555-0101010", "password": "correct-horse"})
    assert res.status_code == 200
    token = res.json()["access_token"]

    res = api.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert res.json() == {"id": user["id"], "phone": "555-0101010", "name": "Sam Lee", "role": "client"}


def test_registration_cannot_pick_admin_role(api):
    res = api.post(
        "/users",
        json={"phone": "555-0202020", "name": "Eve", "password": "password123", "role": "admin"},
    )
    assert res.status_code == 201
    assert res.json()["role"] == "client"


def test_barbers_and_services(api, session, service_ids):
    assert api.get("/barbers").json() == [{"name": "John"}, {"name": "Mike"}, {"name": "Alex"}]

    fade = session.get(Service, service_ids["Fade"])
    fade.is_active = False
    session.add(fade)
    session.commit()

    names = [s["name"] for s in api.get("/services").json()]
    assert "Fade" not in names
    assert len(names) == 4

    everything = api.get("/services", params={"includeInactive": "true"}).json()
    assert len(everything) == 5
    assert {"id", "name", "description", "duration", "price", "isActive"} <= set(everything[0])


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}
