"""Bank statements, transaction categorisation and financial reports."""

from __future__ import annotations

from datetime import date

from flask import Blueprint, jsonify, request

from ...config import EXPENDITURE_CATEGORIES, RECEIPT_CATEGORIES
from ...dao import db, finance_dao, nota_dao
from ...domain.errors import InvalidValueError, TransactionAbortedError
from ...domain.models import TRANSACTION_TYPES
from ...services import auth, cash_book, financial_report, nota_service
from ..validation import is_amount, parse_int

bp = Blueprint("financial", __name__, url_prefix="/api/financial")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _year_arg():
    year = request.args.get("year", type=int)
    if year is None or year < 1900:
        return None
    return year


@bp.get("/statements")
@auth.roles_required(*auth.FINANCE_ROLES)
def list_statements():
    return jsonify({"statements": finance_dao.list_statements()}), 200


@bp.post("/statements")
@auth.roles_required(*auth.FINANCE_ROLES)
def upload_statement():
    payload = request.get_json(silent=True) or {}
    try:
        month = int(payload.get("month"))
        year = int(payload.get("year"))
    except (TypeError, ValueError):
        return jsonify({"error": "Month and year are required"}), 400
    if not 1 <= month <= 12:
        return jsonify({"error": "Month must be between 1 and 12"}), 400

    transactions = payload.get("transactions") or []
    if not isinstance(transactions, list) or not transactions:
        return jsonify({"error": "No valid transactions found"}), 400
    if any(not isinstance(row, dict) or not row.get("transaction_date") for row in transactions):
        return jsonify({"error": "Every transaction needs a transaction_date"}), 400
    for index, row in enumerate(transactions, start=1):
        bad = [column for column in finance_dao.AMOUNT_COLUMNS if not is_amount(row.get(column))]
        if bad:
            return jsonify({"error": f"Transaction {index}: {', '.join(bad)} must be numeric"}), 400

    opening_balance = payload.get("opening_balance")
    if not is_amount(opening_balance):
        return jsonify({"error": "opening_balance must be numeric"}), 400
    try:
        with db.transaction() as conn:
            statement_id = finance_dao.create_statement(
                conn,
                month=month,
                year=year,
                filename=payload.get("filename"),
                uploaded_by=auth.current_user_id(),
                opening_balance=float(opening_balance) if opening_balance not in (None, "") else None,
                transactions=transactions,
            )
    except finance_dao.DuplicateStatementError as exc:
        return jsonify({"error": str(exc)}), 400
    except TransactionAbortedError as exc:
        return jsonify({"error": f"Failed to save statement: {exc}"}), 500

    return jsonify(
        {
            "message": "Statement uploaded successfully",
            "statementId": statement_id,
            "transactionCount": len(transactions),
        }
    ), 201


@bp.get("/categories")
@auth.roles_required(*auth.FINANCE_ROLES)
def list_categories():
    return jsonify({"receipt": RECEIPT_CATEGORIES, "expenditure": EXPENDITURE_CATEGORIES}), 200


@bp.get("/transactions")
@auth.roles_required(*auth.FINANCE_ROLES)
def list_transactions():
    statement_id = request.args.get("statement_id", type=int)
    return jsonify({"transactions": finance_dao.list_transactions(statement_id)}), 200


@bp.put("/transactions")
@auth.roles_required(*auth.FINANCE_ROLES)
def categorize_transaction():
    payload = request.get_json(silent=True) or {}
    if not payload.get("id"):
        return jsonify({"error": "Transaction id is required"}), 400
    try:
        transaction_id = parse_int(payload["id"], "id")
    except InvalidValueError as exc:
        return jsonify({"error": str(exc)}), 400
    if payload.get("transaction_type") not in TRANSACTION_TYPES:
        return jsonify({"error": f"transaction_type must be one of {', '.join(TRANSACTION_TYPES)}"}), 400

    updated = finance_dao.categorize_transaction(transaction_id, payload, auth.current_user_id())
    if not updated:
        return jsonify({"error": "Transaction not found"}), 404
    return jsonify({"message": "Transaction categorized"}), 200


@bp.get("/reports/monthly")
@auth.roles_required(*auth.FINANCE_ROLES)
def monthly_report():
    year = _year_arg()
    if year is None:
        return jsonify({"error": "Valid year is required"}), 400
    return jsonify(financial_report.monthly_report(year).as_dict()), 200


@bp.get("/reports/monthly.xlsx")
@auth.roles_required(*auth.FINANCE_ROLES)
def monthly_report_xlsx():
    year = _year_arg()
    if year is None:
        return jsonify({"error": "Valid year is required"}), 400
    stream, filename = financial_report.export_monthly_xlsx(financial_report.monthly_report(year))
    return (stream.getvalue(), 200, {
        "Content-Type": XLSX_MIMETYPE,
        "Content-Disposition": f"attachment; filename={filename}",
    })


@bp.get("/reports/cash-book")
@auth.roles_required(*auth.FINANCE_ROLES)
def cash_book_report():
    year = _year_arg()
    month = request.args.get("month", type=int)
    if year is None or month is None or not 1 <= month <= 12:
        return jsonify({"error": "Valid month and year are required"}), 400
    return jsonify(cash_book.cash_book(year, month)), 200


def _note_year(value):
    """``tahun`` defaults to the current year; anything else must be a plausible year."""
    if value in (None, ""):
        return date.today().year
    year = parse_int(value, "tahun")
    if year < 1900:
        raise InvalidValueError("tahun must be 1900 or later")
    return year


@bp.get("/nota-penerimaan-sumbangan-khas")
@auth.roles_required(*auth.FINANCE_ROLES)
def special_donation_note():
    try:
        year = _note_year(request.args.get("tahun"))
    except InvalidValueError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        note = nota_service.note_for_year(year)
    except TransactionAbortedError as exc:
        return jsonify({"error": f"Failed to prepare note: {exc}"}), 500
    return jsonify(note), 200


@bp.post("/nota-penerimaan-sumbangan-khas")
@auth.roles_required(*auth.TREASURY_ROLES)
def save_special_donation_note():
    """Either regenerate the year from transactions or save one manual row."""
    payload = request.get_json(silent=True) or {}
    try:
        year = _note_year(payload.get("tahun"))
    except InvalidValueError as exc:
        return jsonify({"error": str(exc)}), 400

    if payload.get("action") == "auto_generate":
        try:
            sub_categories = nota_service.auto_generate(year, auth.current_user_id())
        except TransactionAbortedError as exc:
            return jsonify({"error": f"Failed to generate note: {exc}"}), 500
        return jsonify(
            {"success": True, "message": "Data auto-generated successfully", "year": year,
             "sub_categories": sub_categories}
        ), 200

    sub_category = str(payload.get("sub_category") or "").strip()
    if not payload.get("tahun") or not sub_category:
        return jsonify({"error": "tahun and sub_category are required"}), 400
    try:
        amounts = nota_service.parse_amounts(payload)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        with db.transaction() as conn:
            row_id = nota_dao.save_row(
                conn, year, sub_category, amounts, auto_generated=False, user_id=auth.current_user_id()
            )
    except TransactionAbortedError as exc:
        return jsonify({"error": f"Failed to save entry: {exc}"}), 500
    return jsonify({"success": True, "id": row_id}), 201


@bp.put("/nota-penerimaan-sumbangan-khas")
@auth.roles_required(*auth.TREASURY_ROLES)
def update_special_donation_note():
    payload = request.get_json(silent=True) or {}
    sub_category = str(payload.get("sub_category") or "").strip()
    if not payload.get("id") or not sub_category:
        return jsonify({"error": "id and sub_category are required"}), 400
    try:
        row_id = parse_int(payload["id"], "id")
        amounts = nota_service.parse_amounts(payload)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        updated = nota_dao.update_row(row_id, sub_category, amounts, auth.current_user_id())
    except nota_dao.DuplicateNoteRowError as exc:
        return jsonify({"error": str(exc)}), 400
    if not updated:
        return jsonify({"error": "Entry not found"}), 404
    return jsonify({"success": True}), 200


@bp.delete("/nota-penerimaan-sumbangan-khas")
@auth.roles_required(*auth.TREASURY_ROLES)
def delete_special_donation_note():
    row_id = request.args.get("id", type=int)
    if row_id is None:
        return jsonify({"error": "Missing ID"}), 400
    if not nota_dao.delete_row(row_id):
        return jsonify({"error": "Entry not found"}), 404
    return jsonify({"success": True}), 200
