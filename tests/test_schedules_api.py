from __future__ import annotations

import sqlite3
from datetime import date

from isar.dao import availability_dao, db, schedule_dao
from isar.domain.models import DutyAssignment


def seed_slots(app, rows):
    with app.app_context():
        with db.transaction() as conn:
            schedule_dao.upsert_slots(conn, rows, None)


def count_slots(app) -> int:
    with app.app_context():
        return db.query_one("SELECT COUNT(1) AS n FROM schedules")["n"]


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.data == b"OK"


def test_copy_requires_login_and_role(client, login):
    response = client.post("/api/schedules/copy", json={"start_date": "2024-06-19"})
    assert response.status_code == 401

    login("imam")
    response = client.post("/api/schedules/copy", json={"start_date": "2024-06-19"})
    assert response.status_code == 403


def test_copy_rejects_missing_date(client, login):
    login("head_imam")
    response = client.post("/api/schedules/copy", json={})
    assert response.status_code == 400
    response = client.post("/api/schedules/copy", json={"start_date": "19/06/2024"})
    assert response.status_code == 400


def test_copy_without_prior_week_returns_404_and_writes_nothing(app, client, login):
    login("head_imam")
    response = client.post("/api/schedules/copy", json={"start_date": "2024-06-19"})

    assert response.status_code == 404
    assert "No schedules found for the previous week" in response.get_json()["error"]
    assert count_slots(app) == 0


def test_copy_forward_through_api(app, client, login, make_user):
    imam = make_user("Imam Ali", "imam")
    bilal = make_user("Bilal Abu", "bilal")
    seed_slots(app, [
        DutyAssignment(date(2024, 6, 12), "Subuh", imam, bilal),
        DutyAssignment(date(2024, 6, 12), "Maghrib", imam, bilal),
    ])
    with app.app_context():
        with db.transaction() as conn:
            availability_dao.mark_unavailable(conn, imam, date(2024, 6, 19), ["Subuh"], "Outstation")

    head = login("head_imam")
    response = client.post("/api/schedules/copy", json={"start_date": "2024-06-19"})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["conflictCount"] == 1
    assert [row["prayer_time"] for row in payload["created"]] == ["Subuh", "Maghrib"]
    assert payload["conflicts"][0]["imam_unavailable"] is True
    assert payload["created"][0]["imam_color"]["bg"] == "#6c757d"

    with app.app_context():
        rows = schedule_dao.list_slots(date(2024, 6, 19), date(2024, 6, 25))
        created_by = db.query_one("SELECT created_by FROM schedules WHERE date = '2024-06-19' LIMIT 1")
    assert [(r["prayer_time"], r["imam_id"], r["bilal_id"]) for r in rows] == [
        ("Subuh", None, bilal),
        ("Maghrib", imam, bilal),
    ]
    assert created_by["created_by"] == head

    again = client.post("/api/schedules/copy", json={"start_date": "2024-06-19"})
    assert again.status_code == 200
    assert count_slots(app) == 4


def test_list_schedules_for_range(app, client, login, make_user):
    imam = make_user("Imam Ali", "imam")
    seed_slots(app, [
        DutyAssignment(date(2024, 6, 13), "Isyak", imam, None),
        DutyAssignment(date(2024, 6, 13), "Subuh", imam, None),
    ])
    login("bilal")

    response = client.get("/api/schedules?start_date=2024-06-12&end_date=2024-06-18")

    assert response.status_code == 200
    schedules = response.get_json()["schedules"]
    assert [s["prayer_time"] for s in schedules] == ["Subuh", "Isyak"]
    assert schedules[0]["imam_name"] == "Imam Ali"
    assert schedules[0]["bilal_color"]["bg"] == "#6c757d"


def test_update_slot_checks_version(app, client, login, make_user):
    imam = make_user("Imam Ali", "imam")
    other = make_user("Imam Omar", "imam")
    seed_slots(app, [DutyAssignment(date(2024, 6, 13), "Asar", imam, None)])
    with app.app_context():
        slot = schedule_dao.list_slots(date(2024, 6, 13), date(2024, 6, 13))[0]
    login("admin")

    ok = client.put(f"/api/schedules/{slot['id']}", json={"imam_id": other, "version": slot["version"]})
    assert ok.status_code == 200
    assert ok.get_json()["schedule"]["imam_id"] == other
    assert ok.get_json()["schedule"]["version"] == slot["version"] + 1

    stale = client.put(f"/api/schedules/{slot['id']}", json={"imam_id": imam, "version": slot["version"]})
    assert stale.status_code == 409
    assert stale.get_json()["version"] == slot["version"] + 1

    missing = client.put("/api/schedules/999", json={"imam_id": imam})
    assert missing.status_code == 404


def test_copy_over_a_slot_invalidates_edits_prepared_before_it(app, client, login, make_user):
    imam = make_user("Imam Ali", "imam")
    other = make_user("Imam Omar", "imam")
    seed_slots(app, [
        DutyAssignment(date(2024, 6, 12), "Asar", imam, None),
        DutyAssignment(date(2024, 6, 19), "Asar", other, None),
    ])
    with app.app_context():
        before = schedule_dao.list_slots(date(2024, 6, 19), date(2024, 6, 19))[0]
    head = login("head_imam")

    assert client.post("/api/schedules/copy", json={"start_date": "2024-06-19"}).status_code == 200

    with app.app_context():
        after = db.query_one("SELECT * FROM schedules WHERE id = ?", (before["id"],))
    assert after["imam_id"] == imam
    assert after["version"] == before["version"] + 1
    assert after["modified_by"] == head
    assert after["created_by"] is None

    stale = client.put(f"/api/schedules/{before['id']}", json={"imam_id": other, "version": before["version"]})
    assert stale.status_code == 409


def test_delete_slot(app, client, login):
    seed_slots(app, [DutyAssignment(date(2024, 6, 13), "Asar", None, None)])
    with app.app_context():
        slot_id = schedule_dao.list_slots(date(2024, 6, 13), date(2024, 6, 13))[0]["id"]
    login("head_imam")

    assert client.delete(f"/api/schedules/{slot_id}").status_code == 200
    assert client.delete(f"/api/schedules/{slot_id}").status_code == 404
    assert count_slots(app) == 0


def test_copy_rolls_back_when_a_write_fails(app, client, login, monkeypatch):
    seed_slots(app, [DutyAssignment(date(2024, 6, 12), "Subuh", None, None)])

    def broken_upsert(conn, rows, user_id):
        conn.execute(
            "INSERT INTO schedules(date, prayer_time) VALUES ('2024-06-19', 'Subuh')"
        )
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(schedule_dao, "upsert_slots", broken_upsert)
    login("admin")

    response = client.post("/api/schedules/copy", json={"start_date": "2024-06-19"})

    assert response.status_code == 500
    assert count_slots(app) == 1


def test_malformed_roster_input_is_a_bad_request(app, client, login):
    seed_slots(app, [DutyAssignment(date(2024, 6, 13), "Asar", None, None)])
    with app.app_context():
        slot_id = schedule_dao.list_slots(date(2024, 6, 13), date(2024, 6, 13))[0]["id"]
    login("head_imam")

    assert client.put(f"/api/schedules/{slot_id}", json={"version": "abc"}).status_code == 400
    assert client.put(f"/api/schedules/{slot_id}", json={"imam_id": "Imam Ali"}).status_code == 400
    assert client.put(f"/api/schedules/{slot_id}", json={"bilal_id": True}).status_code == 400
    assert client.post("/api/schedules/copy", json={"start_date": 20240619}).status_code == 400
    assert client.post("/api/schedules/copy", json={"start_date": "2024-06-19T09:00"}).status_code == 400
    assert client.get("/api/schedules?start_date=2024-06-12x&end_date=2024-06-18").status_code == 400

    unchanged = client.put(f"/api/schedules/{slot_id}", json={"imam_id": "", "version": "1"})
    assert unchanged.status_code == 200
    assert unchanged.get_json()["schedule"]["version"] == 2


def test_init_db_command_reports_migrations(app):
    runner = app.test_cli_runner()

    current = runner.invoke(args=["init-db"])
    assert current.exit_code == 0
    assert "Schema already up to date." in current.output

    rebuilt = runner.invoke(args=["init-db", "--force"])
    assert rebuilt.exit_code == 0
    assert "0001_init, 0002_special_donation_notes" in rebuilt.output
    with app.app_context():
        versions = [row["version"] for row in db.query_all("SELECT version FROM schema_migrations ORDER BY version")]
    assert versions == ["0001_init", "0002_special_donation_notes"]
