from __future__ import annotations

from pathlib import Path

import pytest

from isar import create_app
from isar.dao import users_dao


@pytest.fixture()
def app(tmp_path: Path):
    app = create_app({
        "TESTING": True,
        "DATABASE": str(tmp_path / "test.sqlite"),
        "AUTO_INIT_DB": True,
        "SECRET_KEY": "test",
    })
    yield app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def make_user(app):
    def _make_user(name: str, role: str, *, phone: str | None = None, password: str | None = None) -> int:
        email = f"{name.lower().replace(' ', '.')}@isar.test"
        with app.app_context():
            return users_dao.create_user(
                {"name": name, "email": email, "role": role, "phone": phone, "password": password}
            )

    return _make_user


@pytest.fixture()
def login(client, make_user):
    """Create a user with ``role`` and put it in the test client's session."""

    def _login(role: str, name: str | None = None) -> int:
        name = name or f"{role.title()} User"
        user_id = make_user(name, role)
        with client.session_transaction() as session:
            session["user"] = {"id": user_id, "name": name, "role": role}
        return user_id

    return _login
