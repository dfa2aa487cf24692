from __future__ import annotations

from datetime import date

import pytest

from isar.domain.models import PRAYER_TIMES
from isar.services import whatsapp_service
from isar.services.whatsapp_commands import (
    ACTION_CANCEL,
    ACTION_HELP,
    ACTION_LEAVE,
    ACTION_LIST,
    Command,
    CommandError,
    format_date_malay,
    normalize_phone_number,
    parse_command,
)


@pytest.mark.parametrize(
    "body, expected_day",
    [
        ("CUTI 2024-12-01 Subuh", date(2024, 12, 1)),
        ("cuti 01/12/2024 subuh", date(2024, 12, 1)),
        ("TIDAK HADIR 01-12-2024 Subuh", date(2024, 12, 1)),
    ],
)
def test_parse_leave_date_formats(body, expected_day):
    command = parse_command(body)
    assert command.action == ACTION_LEAVE
    assert command.day == expected_day
    assert command.prayer_times == ("Subuh",)


def test_prayer_aliases_and_whole_day():
    assert parse_command("CUTI 2024-12-01 zuhur").prayer_times == ("Zohor",)
    assert parse_command("CUTI 2024-12-01 ISYA").prayer_times == ("Isyak",)
    assert parse_command("CUTI 2024-12-01 semua").prayer_times == PRAYER_TIMES
    assert parse_command("CUTI 2024-12-01").prayer_times == PRAYER_TIMES


def test_leave_errors_carry_reply_text():
    with pytest.raises(CommandError, match="Format tidak betul"):
        parse_command("CUTI")
    with pytest.raises(CommandError, match="Tarikh tidak dijumpai"):
        parse_command("CUTI esok Subuh")
    with pytest.raises(CommandError, match="Format tarikh tidak sah: 2024-02-30"):
        parse_command("CUTI 2024-02-30 Subuh")
    with pytest.raises(CommandError, match="Waktu solat tidak sah: Dhuha"):
        parse_command("CUTI 2024-12-01 Dhuha")


def test_other_commands():
    cancel = parse_command("batal 2024-12-01 Maghrib")
    assert cancel.action == ACTION_CANCEL
    assert cancel.prayer_times == ("Maghrib",)
    assert parse_command("SENARAI").action == ACTION_LIST
    assert parse_command("status").action == ACTION_LIST
    assert parse_command("assalamualaikum").action == ACTION_HELP


def test_phone_number_variants():
    assert normalize_phone_number("whatsapp:+60123456789") == ["+60123456789", "0123456789", "60123456789"]
    assert normalize_phone_number("0123456789") == ["0123456789", "+60123456789", "60123456789"]


def test_malay_date_format():
    assert format_date_malay(date(2024, 6, 12)) == "Rabu, 12 Jun 2024"
    assert format_date_malay(date(2024, 12, 1)) == "Ahad, 1 Disember 2024"


def send(client, sender, body):
    response = client.post("/api/whatsapp/webhook", data={"From": sender, "Body": body})
    assert response.status_code == 200
    return response.get_json()["reply"]


def test_webhook_leave_list_and_cancel(client, make_user):
    make_user("Imam Ali", "imam", phone="0123456789")

    reply = send(client, "whatsapp:+60123456789", "CUTI 2099-12-01 Subuh")
    assert "Cuti Berjaya Direkodkan" in reply
    assert "Subuh" in reply

    send(client, "whatsapp:+60123456789", "CUTI 2099-12-02 semua")
    listing = send(client, "whatsapp:+60123456789", "SENARAI")
    assert listing.index("1 Disember 2099") < listing.index("2 Disember 2099")
    assert listing.count("•") == 6

    cancelled = send(client, "whatsapp:+60123456789", "BATAL 2099-12-01 Subuh")
    assert "Cuti Berjaya Dibatalkan" in cancelled
    again = send(client, "whatsapp:+60123456789", "BATAL 2099-12-01 Subuh")
    assert "Tiada rekod cuti" in again


def test_webhook_rejects_unknown_numbers_and_roles(client, make_user):
    make_user("Bendahari", "bendahari", phone="0198765432")

    assert "tidak berdaftar" in send(client, "whatsapp:+60111111111", "SENARAI")
    assert "hanya untuk Imam dan Bilal" in send(client, "whatsapp:+60198765432", "SENARAI")


def test_webhook_help_and_bad_command(client, make_user):
    make_user("Bilal Abu", "bilal", phone="60133333333")

    assert "Assalamualaikum Bilal Abu" in send(client, "whatsapp:+60133333333", "hai")
    assert "Waktu solat tidak sah" in send(client, "whatsapp:+60133333333", "CUTI 2099-01-01 Dhuha")


def test_webhook_status(client):
    response = client.get("/api/whatsapp/webhook")
    assert response.status_code == 200
    assert "CUTI" in response.get_json()["commands"]


def test_undated_leave_command_gets_usage_text(app, make_user, monkeypatch):
    make_user("Imam Ali", "imam", phone="0123456789")
    monkeypatch.setattr(whatsapp_service, "parse_command", lambda body: Command(ACTION_LEAVE))

    with app.app_context():
        reply = whatsapp_service.handle_message("whatsapp:+60123456789", "CUTI")

    assert "Assalamualaikum Imam Ali" in reply
