"""Yearly receipts/expenditure statement and its Excel export."""
from __future__ import annotations

import logging
import warnings
from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import Any, Dict, Iterable, List, Tuple

from flask import current_app
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

from ..adapters.config_loader import load_config
from ..config import CATEGORY_MAP
from ..dao import finance_dao
from ..domain.errors import UnmappedCategoryWarning
from ..domain.finance import (
    MONTH_LABELS,
    ZERO,
    CategoryMap,
    MonthlySeries,
    OpeningBalanceAnchor,
    YearlyReport,
    to_decimal,
)
from ..domain.models import EXPENDITURE, RECEIPT, TransactionRecord

logger = logging.getLogger(__name__)

HEADER_FONT = Font(bold=True)
CENTER = Alignment(horizontal="center", vertical="center")


def aggregate_year(
    year: int,
    transactions: Iterable[TransactionRecord],
    category_map: CategoryMap,
    anchor: OpeningBalanceAnchor,
) -> YearlyReport:
    receipts = {name: MonthlySeries() for name in category_map.receipt_categories}
    expenditures = {name: MonthlySeries() for name in category_map.expenditure_categories}
    unmapped: List[str] = []

    for txn in transactions:
        if txn.date.year != year:
            continue
        if txn.transaction_type == RECEIPT:
            bucket, amount = receipts, txn.credit_amount
        elif txn.transaction_type == EXPENDITURE:
            bucket, amount = expenditures, txn.debit_amount
        else:
            continue
        # typed on upload but not yet categorised
        if not txn.report_category_raw:
            continue

        category, mapped = category_map.resolve(txn.transaction_type, txn.report_category_raw)
        if not mapped and txn.report_category_raw not in unmapped:
            unmapped.append(txn.report_category_raw)
            logger.warning(
                "Unmapped %s category %r reported under %r",
                txn.transaction_type,
                txn.report_category_raw,
                category,
            )
            warnings.warn(
                f"Unmapped {txn.transaction_type} category {txn.report_category_raw!r}",
                UnmappedCategoryWarning,
                stacklevel=2,
            )
        bucket[category].add(txn.date.month, amount if amount is not None else ZERO)

    receipt_totals = MonthlySeries.summed(receipts.values())
    expenditure_totals = MonthlySeries.summed(expenditures.values())
    surplus = MonthlySeries(
        months=[r - e for r, e in zip(receipt_totals.months, expenditure_totals.months)],
        total=receipt_totals.total - expenditure_totals.total,
    )

    year_opening = anchor.resolve()
    opening_months: List[Decimal] = []
    closing_months: List[Decimal] = []
    running = year_opening
    for movement in surplus.months:
        opening_months.append(running)
        running = running + movement
        closing_months.append(running)

    return YearlyReport(
        year=year,
        receipt_categories=category_map.receipt_categories,
        expenditure_categories=category_map.expenditure_categories,
        receipts=receipts,
        expenditures=expenditures,
        receipt_totals=receipt_totals,
        expenditure_totals=expenditure_totals,
        surplus_deficit=surplus,
        opening_balances=MonthlySeries(months=opening_months, total=year_opening),
        closing_balances=MonthlySeries(months=closing_months, total=running),
        unmapped_categories=unmapped,
    )


def category_map_from_app() -> CategoryMap:
    path = current_app.config.get("CATEGORY_MAP_PATH")
    payload: Dict[str, Any] = load_config(path) if path else CATEGORY_MAP
    return CategoryMap.from_config(payload)


def _to_record(row: Dict[str, Any]) -> TransactionRecord:
    txn_type = row["transaction_type"]
    raw = row["category_receipt"] if txn_type == RECEIPT else row["category_expenditure"]
    return TransactionRecord(
        date=date.fromisoformat(row["transaction_date"][:10]),
        debit_amount=to_decimal(row["debit_amount"]) if row["debit_amount"] is not None else None,
        credit_amount=to_decimal(row["credit_amount"]) if row["credit_amount"] is not None else None,
        report_category_raw=raw,
        transaction_type=txn_type,
    )


def load_anchor(year: int) -> OpeningBalanceAnchor:
    january = finance_dao.january_opening_balance(year)
    earliest = finance_dao.earliest_opening_balance()
    return OpeningBalanceAnchor(
        january_balance=to_decimal(january) if january is not None else None,
        prior_net=to_decimal(finance_dao.net_before(date(year, 1, 1))),
        earliest_balance=to_decimal(earliest) if earliest is not None else None,
    )


def monthly_report(year: int) -> YearlyReport:
    rows = finance_dao.categorized_between(date(year, 1, 1), date(year, 12, 31))
    return aggregate_year(
        year,
        (_to_record(row) for row in rows),
        category_map_from_app(),
        load_anchor(year),
    )


def _row(label: str, series: MonthlySeries) -> List[Any]:
    return [label] + [float(value) for value in series.months] + [float(series.total)]


def export_monthly_xlsx(report: YearlyReport) -> Tuple[BytesIO, str]:
    wb = Workbook()
    ws = wb.active
    ws.title = str(report.year)

    ws.append(["Laporan Kewangan Bulanan Dan Berkala", report.year])
    ws.append(["Perkara"] + list(MONTH_LABELS) + ["Jumlah"])
    for cell in ws[2]:
        cell.font = HEADER_FONT
        cell.alignment = CENTER

    ws.append(["Baki Awal Bulan"] + [float(v) for v in report.opening_balances.months] + [float(report.year_opening_balance)])
    ws.append(["Terimaan"])
    for name in report.receipt_categories:
        ws.append(_row(name, report.receipts[name]))
    ws.append(_row("Jumlah Terimaan", report.receipt_totals))
    ws.append(["Perbelanjaan"])
    for name in report.expenditure_categories:
        ws.append(_row(name, report.expenditures[name]))
    ws.append(_row("Jumlah Perbelanjaan", report.expenditure_totals))
    ws.append(_row("Lebih / (Kurang)", report.surplus_deficit))
    ws.append(["Baki Akhir"] + [float(v) for v in report.closing_balances.months] + [float(report.year_closing_balance)])

    for row in ws.iter_rows(min_row=3):
        label = row[0].value or ""
        if label.startswith(("Jumlah", "Baki", "Terimaan", "Perbelanjaan", "Lebih")):
            row[0].font = HEADER_FONT

    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream, f"laporan_bulanan_{report.year}.xlsx"
