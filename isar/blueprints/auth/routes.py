"""Session login for the JSON API."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ...dao import users_dao
from ...services import auth

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/api")


@bp.post("/login")
def login():
    payload = request.get_json(silent=True) or {}
    email = (payload.get("email") or "").strip()
    password = payload.get("password") or ""
    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    user = users_dao.authenticate(email, password)
    if user is None:
        logger.info("Failed login for %s", email)
        return jsonify({"error": "Invalid credentials"}), 401

    auth.login_user(user)
    return jsonify({"user": auth.current_user()}), 200


@bp.post("/logout")
def logout():
    auth.logout_user()
    return jsonify({"message": "Logged out"}), 200


@bp.get("/me")
@auth.roles_required()
def me():
    return jsonify({"user": auth.current_user()}), 200
