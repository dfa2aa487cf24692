"""Application factory for the iSAR API."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click
from flask import Flask
from flask.cli import with_appcontext

from .config import DEFAULT_CONFIG
from .dao import db as db_module
from .dao import users_dao
from .domain.models import ROLES
from .blueprints.auth.routes import bp as auth_bp
from .blueprints.availability.routes import bp as availability_bp
from .blueprints.bookings.routes import bp as bookings_bp
from .blueprints.financial.routes import bp as financial_bp
from .blueprints.preachers.routes import bp as preachers_bp
from .blueprints.schedules.routes import bp as schedules_bp
from .blueprints.whatsapp.routes import bp as whatsapp_bp

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

BLUEPRINTS = (
    auth_bp,
    schedules_bp,
    availability_bp,
    financial_bp,
    preachers_bp,
    bookings_bp,
    whatsapp_bp,
)


def configure_logging(level: str | int = "INFO") -> None:
    """Attach a stdout handler to the package logger once."""
    logger = logging.getLogger("isar")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


def create_app(config: dict[str, Any] | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env("ISAR")

    if config:
        app.config.update(config)

    database_path = app.config.get(
        "DATABASE",
        Path(app.instance_path) / "isar.sqlite",
    )
    if isinstance(database_path, Path):
        database_path = str(database_path)
    app.config["DATABASE"] = database_path

    Path(app.instance_path).mkdir(parents=True, exist_ok=True)
    app.json.sort_keys = False  # type: ignore[attr-defined]

    configure_logging(app.config["LOG_LEVEL"])

    db_module.register_database(app)
    if app.config.get("AUTO_INIT_DB", True):
        db_module.ensure_schema(app)

    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)

    app.cli.add_command(create_user_command)

    @app.get("/healthz")
    def healthcheck() -> tuple[str, int]:
        return "OK", 200

    return app


@click.command("create-user")
@with_appcontext
@click.option("--name", required=True)
@click.option("--email", required=True)
@click.option("--role", type=click.Choice(ROLES), required=True)
@click.option("--phone", default=None)
@click.password_option()
def create_user_command(name: str, email: str, role: str, phone: str | None, password: str) -> None:
    """Create a login account."""
    user_id = users_dao.create_user(
        {"name": name, "email": email, "role": role, "phone": phone, "password": password}
    )
    click.echo(f"Created user {user_id} ({role}).")
