"""Session helpers and role checks for the JSON API."""
from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar

from flask import jsonify, session

F = TypeVar("F", bound=Callable[..., Any])

FINANCE_ROLES = ("admin", "head_imam", "bendahari")
ROSTER_ROLES = ("admin", "head_imam")
TREASURY_ROLES = ("admin", "bendahari")


def current_user() -> Optional[Dict[str, Any]]:
    return session.get("user")


def current_user_id() -> Optional[int]:
    user = current_user()
    return int(user["id"]) if user else None


def login_user(user: Dict[str, Any]) -> None:
    session.clear()
    session["user"] = {"id": user["id"], "name": user["name"], "role": user["role"]}


def logout_user() -> None:
    session.clear()


def roles_required(*roles: str) -> Callable[[F], F]:
    """Reject anonymous callers with 401 and other roles with 403.

    With no roles given any logged-in user passes.
    """

    def decorator(view: F) -> F:
        @wraps(view)
        def wrapped(*args: Any, **kwargs: Any):
            user = current_user()
            if not user:
                return jsonify({"error": "Unauthorized"}), 401
            if roles and user.get("role") not in roles:
                return jsonify({"error": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapped  # type: ignore[return-value]

    return decorator
