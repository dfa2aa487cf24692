"""Unavailability declarations by imams and bilals."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...dao import availability_dao, db
from ...domain.dates import parse_date
from ...domain.errors import InvalidDateError, InvalidValueError, TransactionAbortedError
from ...domain.models import PRAYER_TIMES
from ...services import auth
from ..validation import parse_int

bp = Blueprint("availability", __name__, url_prefix="/api/availability")

DECLARING_ROLES = ("imam", "bilal")


def _target_user_id(payload_user_id) -> int:
    """Imams and bilals act for themselves; roster managers may name someone.

    Raises ``InvalidValueError`` when the named id is not an integer.
    """
    user = auth.current_user() or {}
    if user.get("role") in auth.ROSTER_ROLES and payload_user_id:
        return parse_int(payload_user_id, "user_id")
    return int(user["id"])


@bp.get("")
@auth.roles_required()
def list_availability():
    try:
        start = parse_date(request.args.get("start_date"))
        end = parse_date(request.args.get("end_date"))
    except InvalidDateError as exc:
        return jsonify({"error": str(exc)}), 400

    user_id = request.args.get("user_id", type=int)
    return jsonify({"availability": availability_dao.list_between(start, end, user_id)}), 200


@bp.post("")
@auth.roles_required(*DECLARING_ROLES, *auth.ROSTER_ROLES)
def declare_unavailable():
    payload = request.get_json(silent=True) or {}
    try:
        day = parse_date(payload.get("date"))
    except InvalidDateError as exc:
        return jsonify({"error": str(exc)}), 400

    prayer_time = payload.get("prayer_time")
    if prayer_time not in PRAYER_TIMES:
        return jsonify({"error": f"prayer_time must be one of {', '.join(PRAYER_TIMES)}"}), 400

    try:
        user_id = _target_user_id(payload.get("user_id"))
    except InvalidValueError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        with db.transaction() as conn:
            availability_dao.mark_unavailable(conn, user_id, day, [prayer_time], payload.get("reason"))
    except TransactionAbortedError as exc:
        return jsonify({"error": str(exc)}), 500

    return jsonify(
        {
            "message": "Availability updated",
            "user_id": user_id,
            "date": day.isoformat(),
            "prayer_time": prayer_time,
        }
    ), 201


@bp.delete("")
@auth.roles_required(*DECLARING_ROLES, *auth.ROSTER_ROLES)
def cancel_unavailable():
    try:
        day = parse_date(request.args.get("date"))
    except InvalidDateError as exc:
        return jsonify({"error": str(exc)}), 400

    prayer_time = request.args.get("prayer_time")
    prayer_times = [prayer_time] if prayer_time else list(PRAYER_TIMES)
    try:
        user_id = _target_user_id(request.args.get("user_id"))
    except InvalidValueError as exc:
        return jsonify({"error": str(exc)}), 400
    with db.transaction() as conn:
        cancelled = availability_dao.cancel_unavailable(conn, user_id, day, prayer_times)

    if not cancelled:
        return jsonify({"error": "No unavailability found"}), 404
    return jsonify({"message": "Unavailability cancelled", "cancelled": cancelled}), 200
