from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..dao import availability_dao, db, users_dao
from .whatsapp_commands import (
    ACTION_CANCEL,
    ACTION_LEAVE,
    ACTION_LIST,
    CommandError,
    format_date_malay,
    help_text,
    normalize_phone_number,
    parse_command,
)

logger = logging.getLogger(__name__)

LEAVE_REASON = "Melalui WhatsApp"
DUTY_ROLES = ("imam", "bilal")

NOT_REGISTERED = (
    "❌ Maaf, nombor telefon anda tidak berdaftar dalam sistem iSAR.\n\n"
    "Sila hubungi Head Imam untuk mendaftarkan nombor telefon anda."
)
ROLE_REFUSED = "❌ Maaf, fungsi ini hanya untuk Imam dan Bilal sahaja."
NEW_LEAVE_HINT = "💡 Untuk rekod cuti baru, hantar:\nCUTI [tarikh] [waktu solat]"


def handle_message(sender: str, body: str, *, today: Optional[date] = None) -> Optional[str]:
    """Process one inbound message and return the reply text.

    Returns ``None`` for empty messages, which get no reply.
    """
    body = (body or "").strip()
    if not sender or not body:
        return None

    user = users_dao.find_active_by_phones(normalize_phone_number(sender))
    if user is None:
        logger.info("WhatsApp message from unregistered number %s", sender)
        return NOT_REGISTERED
    logger.info("WhatsApp message from %s (id=%s, role=%s)", user["name"], user["id"], user["role"])

    if user["role"] not in DUTY_ROLES:
        return ROLE_REFUSED

    try:
        command = parse_command(body)
    except CommandError as exc:
        return str(exc)

    if command.action in (ACTION_LEAVE, ACTION_CANCEL):
        # the parser always dates these; anything else gets the usage text
        if command.day is None:
            return help_text(user["name"])
        if command.action == ACTION_LEAVE:
            return _record_leave(user, command.day, command.prayer_times)
        return _cancel_leave(user, command.day, command.prayer_times)
    if command.action == ACTION_LIST:
        return _list_leave(user, today or date.today())
    return help_text(user["name"])


def _record_leave(user: Dict[str, Any], day: date, prayer_times: Sequence[str]) -> str:
    with db.transaction() as conn:
        recorded = availability_dao.mark_unavailable(
            conn, user["id"], day, prayer_times, LEAVE_REASON
        )
    if not recorded:
        return "❌ Gagal merekodkan cuti. Sila cuba lagi atau hubungi Head Imam."
    logger.info(
        "Leave recorded for %s on %s: %s", user["name"], day.isoformat(), ", ".join(recorded)
    )
    return (
        "✅ *Cuti Berjaya Direkodkan*\n\n"
        f"👤 *Nama:* {user['name']}\n"
        f"📅 *Tarikh:* {format_date_malay(day)}\n"
        f"🕌 *Waktu:* {', '.join(recorded)}\n\n"
        "Head Imam telah dimaklumkan.\n\n"
        "_Terima kasih kerana memberitahu lebih awal._"
    )


def _cancel_leave(user: Dict[str, Any], day: date, prayer_times: Sequence[str]) -> str:
    with db.transaction() as conn:
        cancelled = availability_dao.cancel_unavailable(conn, user["id"], day, prayer_times)
    if not cancelled:
        return "ℹ️ Tiada rekod cuti ditemui untuk tarikh dan waktu tersebut."
    return (
        "✅ *Cuti Berjaya Dibatalkan*\n\n"
        f"📅 *Tarikh:* {format_date_malay(day)}\n"
        f"🕌 *Waktu:* {', '.join(cancelled)}\n\n"
        "Anda kini tersedia untuk bertugas."
    )


def _list_leave(user: Dict[str, Any], today: date) -> str:
    records = availability_dao.upcoming_for_user(user["id"], today)
    if not records:
        return f"📋 *Senarai Cuti Anda*\n\nTiada rekod cuti yang akan datang.\n\n{NEW_LEAVE_HINT}"

    lines = ["📋 *Senarai Cuti Anda*", ""]
    current: Optional[date] = None
    for record in records:
        if record["date"] != current:
            if current is not None:
                lines.append("")
            lines.append(f"📅 *{format_date_malay(record['date'])}*")
            current = record["date"]
        lines.append(f"   • {record['prayer_time']}")
    lines.extend(["", NEW_LEAVE_HINT])
    return "\n".join(lines)
