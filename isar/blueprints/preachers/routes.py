"""Preacher registry and the Subuh/Maghrib preaching schedule."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...dao import db, preachers_dao
from ...domain.dates import month_bounds, parse_date
from ...domain.errors import InvalidDateError, InvalidValueError, TransactionAbortedError
from ...services import auth
from ...services.colors import name_color
from ..validation import parse_int

bp = Blueprint("preachers", __name__, url_prefix="/api")


@bp.get("/preachers")
@auth.roles_required()
def list_preachers():
    active_only = request.args.get("active") == "true"
    preachers = [
        {**preacher, "color": name_color(preacher["name"])}
        for preacher in preachers_dao.list_preachers(active_only)
    ]
    return jsonify({"preachers": preachers}), 200


@bp.post("/preachers")
@auth.roles_required("admin")
def create_preacher():
    payload = request.get_json(silent=True) or {}
    name = (payload.get("name") or "").strip()
    if not name:
        return jsonify({"error": "Name is required"}), 400
    try:
        preacher_id = preachers_dao.create_preacher(
            name, payload.get("phone") or None, payload.get("email") or None
        )
    except preachers_dao.DuplicatePreacherEmailError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"message": "Preacher added successfully", "id": preacher_id}), 201


@bp.put("/preachers")
@auth.roles_required("admin")
def update_preacher():
    payload = request.get_json(silent=True) or {}
    if not payload.get("id") or not (payload.get("name") or "").strip():
        return jsonify({"error": "ID and name are required"}), 400
    try:
        preacher_id = parse_int(payload["id"], "id")
        updated = preachers_dao.update_preacher(preacher_id, {**payload, "name": payload["name"].strip()})
    except (InvalidValueError, preachers_dao.DuplicatePreacherEmailError) as exc:
        return jsonify({"error": str(exc)}), 400
    if not updated:
        return jsonify({"error": "Preacher not found"}), 404
    return jsonify({"message": "Preacher updated successfully"}), 200


@bp.delete("/preachers")
@auth.roles_required("admin")
def delete_preacher():
    preacher_id = request.args.get("id", type=int)
    if preacher_id is None:
        return jsonify({"error": "ID is required"}), 400
    if not preachers_dao.deactivate_preacher(preacher_id):
        return jsonify({"error": "Preacher not found"}), 404
    return jsonify({"message": "Preacher deactivated successfully"}), 200


@bp.get("/preacher-schedules")
@auth.roles_required()
def list_preacher_schedules():
    year = request.args.get("year", type=int)
    month = request.args.get("month", type=int)
    start = end = None
    try:
        if year and month:
            if not 1 <= month <= 12:
                return jsonify({"error": "Month must be between 1 and 12"}), 400
            start, end = month_bounds(year, month)
        elif request.args.get("start_date") and request.args.get("end_date"):
            start = parse_date(request.args["start_date"])
            end = parse_date(request.args["end_date"])
    except InvalidDateError as exc:
        return jsonify({"error": str(exc)}), 400
    schedules = preachers_dao.list_schedules(start, end)
    for row in schedules:
        row["subuh_preacher_color"] = name_color(row["subuh_preacher_name"])
        row["maghrib_preacher_color"] = name_color(row["maghrib_preacher_name"])
    return jsonify({"schedules": schedules}), 200


@bp.post("/preacher-schedules")
@auth.roles_required("head_imam")
def save_preacher_schedules():
    payload = request.get_json(silent=True) or {}
    schedules = payload.get("schedules")
    if not isinstance(schedules, list):
        return jsonify({"error": "Schedules array is required"}), 400
    if any(not isinstance(item, dict) for item in schedules):
        return jsonify({"error": "Each schedule must be an object"}), 400
    try:
        schedules = [
            {**item, "schedule_date": parse_date(item.get("schedule_date")).isoformat()} for item in schedules
        ]
    except InvalidDateError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        with db.transaction() as conn:
            count = preachers_dao.upsert_schedules(conn, schedules, auth.current_user_id())
    except TransactionAbortedError as exc:
        return jsonify({"error": f"Failed to save schedules: {exc}"}), 500
    return jsonify({"message": "Schedules saved successfully", "count": count}), 200


@bp.delete("/preacher-schedules")
@auth.roles_required("head_imam")
def delete_preacher_schedule():
    schedule_id = request.args.get("id", type=int)
    schedule_date = request.args.get("date")
    if schedule_id is None and not schedule_date:
        return jsonify({"error": "ID or date is required"}), 400
    deleted = preachers_dao.delete_schedule(schedule_id=schedule_id, schedule_date=schedule_date)
    if not deleted:
        return jsonify({"error": "Schedule not found"}), 404
    return jsonify({"message": "Schedule deleted successfully"}), 200
