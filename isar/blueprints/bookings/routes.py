"""Event-hall booking requests (permohonan majlis)."""

from __future__ import annotations

import math

from flask import Blueprint, jsonify, request

from ...dao import bookings_dao
from ...domain.dates import parse_date
from ...domain.errors import InvalidDateError, InvalidValueError
from ...services import auth
from ..validation import parse_int

bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")

REQUIRED_FIELDS = (
    "applicant_name",
    "ic_number",
    "address",
    "mobile_phone",
    "event_title",
    "event_date",
    "event_day",
    "event_time",
    "event_session",
    "guest_count",
    "agreed_terms",
)


@bp.get("")
def list_bookings():
    check_date = request.args.get("check_date")
    if check_date:
        try:
            day = parse_date(check_date)
        except InvalidDateError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify({"bookings": bookings_dao.bookings_on(day.isoformat())}), 200
    return _paginated_bookings()


@auth.roles_required(*auth.ROSTER_ROLES)
def _paginated_bookings():
    status = request.args.get("status", "all")
    page = max(request.args.get("page", 1, type=int), 1)
    limit = min(max(request.args.get("limit", 10, type=int), 1), 100)
    rows, total = bookings_dao.list_bookings(status, page, limit)
    return jsonify(
        {
            "data": rows,
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "totalPages": math.ceil(total / limit),
            },
        }
    ), 200


@bp.post("")
def create_booking():
    payload = request.get_json(silent=True) or {}
    if any(not payload.get(field) for field in REQUIRED_FIELDS):
        return jsonify({"error": "Sila lengkapkan semua maklumat yang diperlukan"}), 400
    try:
        event_date = parse_date(payload["event_date"]).isoformat()
        guest_count = parse_int(payload["guest_count"], "guest_count")
    except (InvalidDateError, InvalidValueError):
        return jsonify({"error": "Tarikh majlis atau jumlah jemputan tidak sah"}), 400
    # slots are matched on the normalised date
    payload = {**payload, "event_date": event_date, "guest_count": guest_count}

    if bookings_dao.slot_taken(event_date, payload["event_session"]):
        return jsonify(
            {"error": "Tarikh dan waktu ini telah ditempah. Sila pilih tarikh atau waktu lain."}
        ), 400

    booking_id = bookings_dao.create_booking(payload)
    return jsonify(
        {
            "success": True,
            "message": "Permohonan berjaya dihantar. Anda akan dihubungi selepas permohonan diproses.",
            "id": booking_id,
        }
    ), 201


@bp.put("")
@auth.roles_required(*auth.ROSTER_ROLES)
def update_booking_status():
    payload = request.get_json(silent=True) or {}
    status = payload.get("status")
    if not payload.get("id") or not status:
        return jsonify({"error": "Missing required fields"}), 400
    try:
        booking_id = parse_int(payload["id"], "id")
    except InvalidValueError as exc:
        return jsonify({"error": str(exc)}), 400
    if status not in bookings_dao.STATUSES:
        return jsonify({"error": "Invalid status"}), 400
    if status == "rejected" and not payload.get("rejection_reason"):
        return jsonify({"error": "Sila nyatakan sebab penolakan"}), 400

    updated = bookings_dao.update_status(
        booking_id, status, auth.current_user_id(), payload.get("rejection_reason")
    )
    if not updated:
        return jsonify({"error": "Booking not found"}), 404
    return jsonify({"success": True, "message": "Status berjaya dikemaskini"}), 200


@bp.delete("")
@auth.roles_required("admin")
def delete_booking():
    booking_id = request.args.get("id", type=int)
    if booking_id is None:
        return jsonify({"error": "Missing id"}), 400
    if not bookings_dao.delete_booking(booking_id):
        return jsonify({"error": "Booking not found"}), 404
    return jsonify({"success": True, "message": "Permohonan berjaya dipadam"}), 200
