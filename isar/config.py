"""
Default configuration for iSAR. The report taxonomy follows the
monthly receipts and expenditure statement; deployments can replace it with a JSON or
YAML file named by CATEGORY_MAP_PATH.
"""
from __future__ import annotations

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    "SECRET_KEY": "dev",
    # Roster weeks run Wednesday to Tuesday (Monday = 0)
    "WEEK_START_WEEKDAY": 2,
    "CATEGORY_MAP_PATH": None,
    "AUTO_INIT_DB": True,
    "LOG_LEVEL": "INFO",
}

CATEGORY_MAP: Dict[str, Any] = {
    "receipts": {
        "categories": [
            "Sumbangan Am",
            "Sumbangan Khas (Amanah)",
            "Hasil Sewaan / Penjanaan Ekonomi",
            "Pelaburan",
            "Deposit",
            "Hibah Bank",
            "Lain-Lain Terimaan",
        ],
        "mapping": {
            "Sumbangan Am": "Sumbangan Am",
            "Sumbangan Khas (Amanah)": "Sumbangan Khas (Amanah)",
            "Hasil Sewaan/Penjanaan Ekonomi": "Hasil Sewaan / Penjanaan Ekonomi",
            "Hibah Pelaburan": "Pelaburan",
            "Deposit": "Deposit",
            "Hibah Bank": "Hibah Bank",
            "Lain-lain Terimaan": "Lain-Lain Terimaan",
            "Tahlil": "Sumbangan Am",
            "Sumbangan Elaun": "Lain-Lain Terimaan",
        },
        "fallback": "Lain-Lain Terimaan",
    },
    "expenditures": {
        "categories": [
            "Perkhidmatan Dan Pentadbiran",
            "Pembangunan Dan Penyelenggaraan",
            "Dakwah Dan Pengimarahan",
            "Khidmat Sosial Dan Kemasyarakatan",
            "Penjanaan Ekonomi",
            "Pelbagai",
        ],
        "mapping": {
            "Pentadbiran": "Perkhidmatan Dan Pentadbiran",
            "Pengurusan Sumber Manusia": "Perkhidmatan Dan Pentadbiran",
            "Pembangunan dan Penyelenggaraan": "Pembangunan Dan Penyelenggaraan",
            "Dakwah dan Pengimarahan": "Dakwah Dan Pengimarahan",
            "Khidmat Sosial dan Kemasyarakatan": "Khidmat Sosial Dan Kemasyarakatan",
            "Pembelian Aset": "Pelbagai",
            "Perbelanjaan Khas (Amanah)": "Pelbagai",
            "Pelbagai": "Pelbagai",
        },
        "fallback": "Pelbagai",
    },
}

# Raw categories accepted when a transaction is categorised
RECEIPT_CATEGORIES = [
    "Sumbangan Am",
    "Sumbangan Khas (Amanah)",
    "Hasil Sewaan/Penjanaan Ekonomi",
    "Tahlil",
    "Sumbangan Elaun",
    "Hibah Pelaburan",
    "Deposit",
    "Hibah Bank",
    "Lain-lain Terimaan",
]

EXPENDITURE_CATEGORIES = [
    "Pentadbiran",
    "Pengurusan Sumber Manusia",
    "Pembangunan dan Penyelenggaraan",
    "Dakwah dan Pengimarahan",
    "Khidmat Sosial dan Kemasyarakatan",
    "Pembelian Aset",
    "Perbelanjaan Khas (Amanah)",
    "Pelbagai",
]

# Trust-fund sub-categories reported in the special donation note
SPECIAL_DONATION_RECEIPT_CATEGORY = "Sumbangan Khas (Amanah)"
SPECIAL_DONATION_SPENDING_CATEGORY = "Perbelanjaan Khas (Amanah)"
SPECIAL_DONATION_SUBCATEGORIES = [
    "Khairat Kematian",
    "Pembangunan & Selenggara Wakaf",
    "Yuran Pengajian",
    "Pendidikan",
    "Ihya Ramadhan",
    "Ibadah Qurban",
    "Bantuan Bencana",
    "Anak Yatim",
]
