"""Duty roster endpoints: weekly listing, manual edits and copy-forward."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...dao import schedule_dao
from ...domain.dates import parse_date
from ...domain.errors import (
    ConcurrentModificationError,
    InvalidDateError,
    InvalidValueError,
    NoPriorScheduleError,
    TransactionAbortedError,
)
from ...services import auth, schedule_service
from ...services.colors import user_color
from ..validation import parse_int

bp = Blueprint("schedules", __name__, url_prefix="/api/schedules")


@bp.get("")
@auth.roles_required()
def list_schedules():
    start_value = request.args.get("start_date")
    end_value = request.args.get("end_date")
    try:
        if start_value and end_value:
            start, end = parse_date(start_value), parse_date(end_value)
        else:
            start, end = schedule_service.current_week()
    except InvalidDateError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify(
        {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "schedules": schedule_service.list_week(start, end),
        }
    ), 200


@bp.post("/copy")
@auth.roles_required(*auth.ROSTER_ROLES)
def copy_schedules():
    payload = request.get_json(silent=True) or {}
    try:
        start = parse_date(payload.get("start_date"))
    except InvalidDateError:
        return jsonify({"error": "start_date is required (YYYY-MM-DD)"}), 400

    try:
        result = schedule_service.copy_week(start, auth.current_user_id())
    except NoPriorScheduleError as exc:
        return jsonify({"error": str(exc)}), 404
    except TransactionAbortedError as exc:
        return jsonify({"error": f"Failed to copy schedules: {exc}"}), 500

    created = [row.as_dict() for row in result.created]
    for row in created:
        row["imam_color"] = user_color(row["imam_id"])
        row["bilal_color"] = user_color(row["bilal_id"])

    message = f"Copied {len(created)} schedules"
    if result.conflicts:
        message += f" ({len(result.conflicts)} conflicts need attention)"
    return jsonify(
        {
            "message": message,
            "created": created,
            "conflicts": [conflict.as_dict() for conflict in result.conflicts],
            "conflictCount": len(result.conflicts),
        }
    ), 200


@bp.put("/<int:schedule_id>")
@auth.roles_required(*auth.ROSTER_ROLES)
def update_schedule(schedule_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        version = payload.get("version")
        expected_version = parse_int(version, "version") if version is not None else None
        imam_id, bilal_id = (
            parse_int(payload[role], role) if payload.get(role) not in (None, "") else None
            for role in ("imam_id", "bilal_id")
        )
    except InvalidValueError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        slot = schedule_service.update_slot(
            schedule_id,
            imam_id,
            bilal_id,
            auth.current_user_id(),
            expected_version=expected_version,
        )
    except ConcurrentModificationError as exc:
        return jsonify({"error": str(exc), "version": exc.actual_version}), 409

    if slot is None:
        return jsonify({"error": "Schedule not found"}), 404
    return jsonify({"schedule": slot}), 200


@bp.delete("/<int:schedule_id>")
@auth.roles_required(*auth.ROSTER_ROLES)
def delete_schedule(schedule_id: int):
    if not schedule_dao.delete_slot(schedule_id):
        return jsonify({"error": "Schedule not found"}), 404
    return jsonify({"message": "Schedule deleted"}), 200
