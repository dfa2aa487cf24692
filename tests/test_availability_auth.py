from __future__ import annotations

from datetime import date

from isar.domain.dates import week_bounds
from isar.services.colors import PALETTE, UNASSIGNED, name_color, user_color


def test_login_and_logout(client, make_user):
    make_user("Admin", "admin", password="rahsia123")

    bad = client.post("/api/login", json={"email": "admin@isar.test", "password": "salah"})
    assert bad.status_code == 401
    assert client.post("/api/login", json={"email": "admin@isar.test"}).status_code == 400

    ok = client.post("/api/login", json={"email": "admin@isar.test", "password": "rahsia123"})
    assert ok.status_code == 200
    assert ok.get_json()["user"]["role"] == "admin"
    assert client.get("/api/me").get_json()["user"]["name"] == "Admin"

    client.post("/api/logout")
    assert client.get("/api/me").status_code == 401


def test_declare_and_cancel_unavailability(client, login):
    user_id = login("imam", "Imam Ali")

    response = client.post(
        "/api/availability", json={"date": "2024-06-20", "prayer_time": "Asar", "reason": "Kursus"}
    )
    assert response.status_code == 201
    assert response.get_json()["user_id"] == user_id

    # declaring twice keeps a single record
    client.post("/api/availability", json={"date": "2024-06-20", "prayer_time": "Asar", "reason": "Kursus"})
    client.post("/api/availability", json={"date": "2024-06-20", "prayer_time": "Subuh"})

    listed = client.get("/api/availability?start_date=2024-06-19&end_date=2024-06-25").get_json()["availability"]
    assert [(row["prayer_time"], row["user_name"]) for row in listed] == [("Subuh", "Imam Ali"), ("Asar", "Imam Ali")]
    assert listed[1]["reason"] == "Kursus"

    cancelled = client.delete("/api/availability?date=2024-06-20&prayer_time=Asar")
    assert cancelled.status_code == 200
    assert cancelled.get_json()["cancelled"] == ["Asar"]
    assert client.delete("/api/availability?date=2024-06-20&prayer_time=Asar").status_code == 404


def test_head_imam_declares_for_someone_else(client, login, make_user):
    bilal = make_user("Bilal Abu", "bilal")
    login("head_imam")

    response = client.post(
        "/api/availability", json={"date": "2024-06-21", "prayer_time": "Isyak", "user_id": bilal}
    )
    assert response.status_code == 201
    listed = client.get(f"/api/availability?start_date=2024-06-21&end_date=2024-06-21&user_id={bilal}")
    assert listed.get_json()["availability"][0]["user_name"] == "Bilal Abu"


def test_availability_validation(client, login):
    login("bilal")
    assert client.post("/api/availability", json={"date": "2024-06-21", "prayer_time": "Dhuha"}).status_code == 400
    assert client.post("/api/availability", json={"prayer_time": "Subuh"}).status_code == 400
    assert client.get("/api/availability").status_code == 400


def test_bendahari_cannot_declare(client, login):
    login("bendahari")
    assert client.post("/api/availability", json={"date": "2024-06-21", "prayer_time": "Subuh"}).status_code == 403


def test_user_colors_are_stable():
    assert user_color(1) == PALETTE[0]
    assert user_color(len(PALETTE) + 1) == PALETTE[0]
    assert user_color(None) == UNASSIGNED
    assert name_color("Imam Ali") == name_color("Imam Ali")
    assert name_color("Imam Ali") in PALETTE
    assert name_color(None) == UNASSIGNED


def test_roster_week_starts_on_wednesday():
    assert week_bounds(date(2024, 6, 12)) == (date(2024, 6, 12), date(2024, 6, 18))
    assert week_bounds(date(2024, 6, 18)) == (date(2024, 6, 12), date(2024, 6, 18))
    assert week_bounds(date(2024, 6, 10), start_weekday=0) == (date(2024, 6, 10), date(2024, 6, 16))


def test_roster_manager_must_name_a_numeric_user(client, login):
    login("head_imam")

    response = client.post(
        "/api/availability", json={"date": "2024-06-21", "prayer_time": "Isyak", "user_id": "Bilal Abu"}
    )
    assert response.status_code == 400
    assert client.delete("/api/availability?date=2024-06-21&user_id=abc").status_code == 400
    assert client.post("/api/availability", json={"date": 20240621, "prayer_time": "Isyak"}).status_code == 400
