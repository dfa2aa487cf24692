"""Parsing of free-text WhatsApp leave commands.

Supported messages (case-insensitive keywords)::

    CUTI 2024-12-01 Subuh        record leave for one prayer
    CUTI 01/12/2024 semua        record leave for the whole day
    BATAL 2024-12-01 Maghrib     cancel leave
    SENARAI                      list upcoming leave

Anything else is answered with the help text.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, List, Optional, Tuple

from ..domain.models import PRAYER_TIMES

ACTION_LEAVE = "leave"
ACTION_CANCEL = "cancel"
ACTION_LIST = "list"
ACTION_HELP = "help"

LEAVE_PREFIXES = ("CUTI", "TIDAK HADIR", "TIDAKHADIR")
CANCEL_PREFIXES = ("BATAL", "CANCEL")
LIST_PREFIXES = ("SENARAI", "LIST")

PRAYER_ALIASES = {
    "subuh": "Subuh",
    "zohor": "Zohor",
    "zuhur": "Zohor",
    "asar": "Asar",
    "maghrib": "Maghrib",
    "isyak": "Isyak",
    "isya": "Isyak",
}
ALL_PRAYERS = frozenset({"semua", "all"})

DATE_TOKEN = re.compile(r"^(\d{4}-\d{1,2}-\d{1,2}|\d{1,2}[/-]\d{1,2}[/-]\d{4})$")
ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
DMY_SLASH = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
DMY_DASH = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

MALAY_DAYS = ("Isnin", "Selasa", "Rabu", "Khamis", "Jumaat", "Sabtu", "Ahad")
MALAY_MONTHS = (
    "Januari", "Februari", "Mac", "April", "Mei", "Jun",
    "Julai", "Ogos", "September", "Oktober", "November", "Disember",
)

LEAVE_USAGE = """❌ Format tidak betul.

📝 *Format yang betul:*
CUTI [tarikh] [waktu solat]

📅 *Contoh:*
• CUTI 2024-12-01 Subuh
• CUTI 01/12/2024 Maghrib
• CUTI 2024-12-01 semua

💡 *Waktu solat:* Subuh, Zohor, Asar, Maghrib, Isyak
💡 *Guna "semua"* untuk semua waktu solat"""

CANCEL_USAGE = """❌ Format tidak betul.

📝 *Format yang betul:*
BATAL [tarikh] [waktu solat]

📅 *Contoh:*
• BATAL 2024-12-01 Subuh
• BATAL 2024-12-01 semua"""

DATE_FORMATS_HINT = """📅 *Format tarikh yang diterima:*
• 2024-12-01
• 01/12/2024
• 01-12-2024"""


class CommandError(ValueError):
    """A recognised command with bad arguments; the message is the reply."""


@dataclass(frozen=True)
class Command:
    action: str
    day: Optional[date] = None
    prayer_times: Tuple[str, ...] = ()


def normalize_phone_number(phone: str) -> List[str]:
    """Return the stored-phone variants a WhatsApp sender id may match."""
    number = phone.replace("whatsapp:", "").strip()
    formats = [number]
    if number.startswith("+60"):
        formats.append("0" + number[3:])
        formats.append(number[1:])
    elif number.startswith("60"):
        formats.append("0" + number[2:])
        formats.append("+" + number)
    elif number.startswith("0"):
        formats.append("+60" + number[1:])
        formats.append("60" + number[1:])
    return formats


def parse_date(value: str) -> Optional[date]:
    for pattern, order in ((ISO_DATE, (1, 2, 3)), (DMY_SLASH, (3, 2, 1)), (DMY_DASH, (3, 2, 1))):
        match = pattern.match(value)
        if not match:
            continue
        year, month, day = (int(match.group(index)) for index in order)
        try:
            return date(year, month, day)
        except ValueError:
            return None
    return None


def resolve_prayer_times(value: Optional[str]) -> Tuple[str, ...]:
    if not value or value.lower() in ALL_PRAYERS:
        return PRAYER_TIMES
    prayer = PRAYER_ALIASES.get(value.lower())
    if prayer is None:
        raise CommandError(
            f"❌ Waktu solat tidak sah: {value}\n\n"
            "💡 *Waktu solat yang diterima:*\nSubuh, Zohor, Asar, Maghrib, Isyak\n\n"
            '💡 *Atau guna "semua"* untuk semua waktu solat'
        )
    return (prayer,)


def _parse_dated(action: str, text: str, keywords: FrozenSet[str], usage: str, missing_date: str) -> Command:
    parts = text.split()
    if len(parts) < 2:
        raise CommandError(usage)

    date_str = ""
    prayer_str = ""
    for part in parts[1:]:
        if DATE_TOKEN.match(part):
            date_str = part
        elif part.lower() not in keywords:
            prayer_str = part

    if not date_str:
        raise CommandError(missing_date)
    day = parse_date(date_str)
    if day is None:
        raise CommandError(f"❌ Format tarikh tidak sah: {date_str}\n\n{DATE_FORMATS_HINT}")
    return Command(action=action, day=day, prayer_times=resolve_prayer_times(prayer_str))


def parse_command(body: str) -> Command:
    text = body.strip()
    upper = text.upper()
    if upper.startswith(LEAVE_PREFIXES):
        return _parse_dated(
            ACTION_LEAVE,
            text,
            frozenset({"cuti", "tidak", "hadir"}),
            LEAVE_USAGE,
            f"❌ Tarikh tidak dijumpai dalam mesej.\n\n📝 *Format yang betul:*\nCUTI [tarikh] [waktu solat]\n\n{DATE_FORMATS_HINT}",
        )
    if upper.startswith(LIST_PREFIXES) or upper == "STATUS":
        return Command(action=ACTION_LIST)
    if upper.startswith(CANCEL_PREFIXES):
        return _parse_dated(
            ACTION_CANCEL,
            text,
            frozenset({"batal", "cancel"}),
            CANCEL_USAGE,
            "❌ Tarikh tidak dijumpai dalam mesej.",
        )
    return Command(action=ACTION_HELP)


def format_date_malay(day: date) -> str:
    return f"{MALAY_DAYS[day.weekday()]}, {day.day} {MALAY_MONTHS[day.month - 1]} {day.year}"


def help_text(name: str) -> str:
    return f"""🕌 *iSAR WhatsApp Bot*

Assalamualaikum {name}! 👋

📝 *Arahan yang tersedia:*

1️⃣ *Rekod Cuti:*
   CUTI [tarikh] [waktu]
   Contoh: CUTI 2024-12-01 Subuh

2️⃣ *Batal Cuti:*
   BATAL [tarikh] [waktu]
   Contoh: BATAL 2024-12-01 Subuh

3️⃣ *Senarai Cuti:*
   SENARAI

💡 *Waktu solat:* Subuh, Zohor, Asar, Maghrib, Isyak
💡 *Guna "semua"* untuk semua waktu

📅 *Format tarikh:*
   • 2024-12-01
   • 01/12/2024"""
