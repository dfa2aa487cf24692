from __future__ import annotations

from isar.services.colors import UNASSIGNED, name_color


def booking_payload(**overrides):
    payload = {
        "applicant_name": "Ahmad bin Ali",
        "ic_number": "800101-01-1234",
        "address": "No 1, Jalan Surau",
        "mobile_phone": "0123456789",
        "event_title": "Majlis Tahlil",
        "event_date": "2024-07-06",
        "event_day": "Sabtu",
        "event_time": "20:30",
        "event_session": "malam",
        "guest_count": 80,
        "equipment": ["khemah", "kerusi"],
        "agreed_terms": True,
    }
    payload.update(overrides)
    return payload


def test_public_booking_and_slot_conflict(client):
    created = client.post("/api/bookings", json=booking_payload())
    assert created.status_code == 201
    assert created.get_json()["id"]

    clash = client.post("/api/bookings", json=booking_payload(applicant_name="Siti"))
    assert clash.status_code == 400

    other_session = client.post("/api/bookings", json=booking_payload(event_session="pagi"))
    assert other_session.status_code == 201

    taken = client.get("/api/bookings?check_date=2024-07-06").get_json()["bookings"]
    assert sorted(b["event_session"] for b in taken) == ["malam", "pagi"]


def test_booking_requires_fields(client):
    response = client.post("/api/bookings", json=booking_payload(agreed_terms=False))
    assert response.status_code == 400
    response = client.post("/api/bookings", json=booking_payload(event_date="06/07/2024"))
    assert response.status_code == 400


def test_booking_review_flow(client, login):
    booking_id = client.post("/api/bookings", json=booking_payload()).get_json()["id"]

    assert client.get("/api/bookings").status_code == 401
    login("head_imam")

    listing = client.get("/api/bookings?status=pending").get_json()
    assert listing["pagination"] == {"total": 1, "page": 1, "limit": 10, "totalPages": 1}
    assert listing["data"][0]["equipment"] == ["khemah", "kerusi"]

    no_reason = client.put("/api/bookings", json={"id": booking_id, "status": "rejected"})
    assert no_reason.status_code == 400

    rejected = client.put(
        "/api/bookings", json={"id": booking_id, "status": "rejected", "rejection_reason": "Tarikh penuh"}
    )
    assert rejected.status_code == 200
    assert client.get("/api/bookings?check_date=2024-07-06").get_json()["bookings"] == []

    # a rejected slot may be requested again
    assert client.post("/api/bookings", json=booking_payload()).status_code == 201

    assert client.delete(f"/api/bookings?id={booking_id}").status_code == 403


def test_admin_deletes_booking(client, login):
    booking_id = client.post("/api/bookings", json=booking_payload()).get_json()["id"]
    login("admin")
    assert client.delete(f"/api/bookings?id={booking_id}").status_code == 200
    assert client.delete(f"/api/bookings?id={booking_id}").status_code == 404

def test_booking_slot_cannot_be_taken_with_a_timestamped_date(client):
    assert client.post("/api/bookings", json=booking_payload()).status_code == 201

    with_time = client.post("/api/bookings", json=booking_payload(event_date="2024-07-06T09:00"))
    assert with_time.status_code == 400
    padded = client.post("/api/bookings", json=booking_payload(event_date=" 2024-07-06 "))
    assert padded.status_code == 400
    assert "telah ditempah" in padded.get_json()["error"]

    taken = client.get("/api/bookings", query_string={"check_date": " 2024-07-06"}).get_json()["bookings"]
    assert [b["event_session"] for b in taken] == ["malam"]
    assert client.get("/api/bookings?check_date=2024-07-06T00:00").status_code == 400


def test_booking_dates_are_stored_normalised(client, login):
    client.post("/api/bookings", json=booking_payload(event_date=" 2024-08-10", guest_count="120"))
    login("head_imam")

    booking = client.get("/api/bookings").get_json()["data"][0]
    assert booking["event_date"] == "2024-08-10"
    assert booking["guest_count"] == 120
    assert client.post("/api/bookings", json=booking_payload(guest_count="ramai")).status_code == 400


def test_booking_status_update_rejects_bad_id(client, login):
    login("head_imam")
    assert client.put("/api/bookings", json={"id": "abc", "status": "approved"}).status_code == 400
    assert client.put("/api/bookings", json={"id": {"n": 1}, "status": "approved"}).status_code == 400



def test_preacher_crud(client, login):
    login("admin")

    created = client.post("/api/preachers", json={"name": "Ustaz Hamzah", "email": "hamzah@example.com"})
    assert created.status_code == 201
    preacher_id = created.get_json()["id"]

    duplicate = client.post("/api/preachers", json={"name": "Ustaz Lain", "email": "hamzah@example.com"})
    assert duplicate.status_code == 400
    assert client.post("/api/preachers", json={"name": "  "}).status_code == 400

    updated = client.put(
        "/api/preachers", json={"id": preacher_id, "name": "Ustaz Hamzah Yusof", "phone": "0191234567"}
    )
    assert updated.status_code == 200

    assert client.delete(f"/api/preachers?id={preacher_id}").status_code == 200
    everyone = client.get("/api/preachers").get_json()["preachers"]
    active = client.get("/api/preachers?active=true").get_json()["preachers"]
    assert everyone[0]["name"] == "Ustaz Hamzah Yusof"
    assert everyone[0]["is_active"] is False
    assert active == []


def test_preacher_schedule_upsert(client, login, app):
    login("admin")
    first = client.post("/api/preachers", json={"name": "Ustaz A"}).get_json()["id"]
    second = client.post("/api/preachers", json={"name": "Ustaz B"}).get_json()["id"]

    assert client.post("/api/preacher-schedules", json={"schedules": []}).status_code == 403

    with client.session_transaction() as session:
        session["user"] = {"id": 1, "name": "Head", "role": "head_imam"}

    saved = client.post("/api/preacher-schedules", json={"schedules": [
        {"schedule_date": "2024-07-01", "subuh_preacher_id": first, "maghrib_preacher_id": second},
        {"schedule_date": "2024-07-02", "maghrib_preacher_id": first, "notes": "Kuliah khas"},
    ]})
    assert saved.status_code == 200
    assert saved.get_json()["count"] == 2

    client.post("/api/preacher-schedules", json={"schedules": [
        {"schedule_date": "2024-07-01", "subuh_preacher_id": second},
    ]})

    rows = client.get("/api/preacher-schedules?year=2024&month=7").get_json()["schedules"]
    assert [r["schedule_date"] for r in rows] == ["2024-07-01", "2024-07-02"]
    assert rows[0]["subuh_preacher_name"] == "Ustaz B"
    assert rows[0]["maghrib_preacher_id"] is None
    assert rows[1]["notes"] == "Kuliah khas"

    bad = client.post("/api/preacher-schedules", json={"schedules": [{"schedule_date": "July 1"}]})
    assert bad.status_code == 400

    assert client.delete("/api/preacher-schedules?date=2024-07-02").status_code == 200
    assert client.delete("/api/preacher-schedules?date=2024-07-02").status_code == 404
    assert len(client.get("/api/preacher-schedules").get_json()["schedules"]) == 1


def test_preacher_colours_follow_names(client, login):
    login("admin")
    preacher = client.post("/api/preachers", json={"name": "Ustaz Hamzah"}).get_json()["id"]
    assert client.put("/api/preachers", json={"id": "satu", "name": "Ustaz Hamzah"}).status_code == 400

    listed = client.get("/api/preachers").get_json()["preachers"]
    assert listed[0]["color"] == name_color("Ustaz Hamzah")

    with client.session_transaction() as session:
        session["user"] = {"id": 1, "name": "Head", "role": "head_imam"}
    client.post("/api/preacher-schedules", json={"schedules": [
        {"schedule_date": "2024-07-01", "subuh_preacher_id": preacher},
    ]})
    assert client.post("/api/preacher-schedules", json={"schedules": ["2024-07-02"]}).status_code == 400

    row = client.get("/api/preacher-schedules?year=2024&month=7").get_json()["schedules"][0]
    assert row["subuh_preacher_color"] == name_color("Ustaz Hamzah")
    assert row["maghrib_preacher_color"] == UNASSIGNED
