"""SQLite access for iSAR: one connection per app context, schema migrations and query helpers."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Sequence

import click
from flask import Flask, current_app, g
from flask.cli import with_appcontext

from ..domain.errors import TransactionAbortedError
from ..domain.models import PRAYER_TIMES

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"
MIGRATIONS = ("0001_init", "0002_special_donation_notes")


def prayer_order(column: str = "prayer_time") -> str:
    """SQL expression sorting prayer times Subuh..Isyak."""
    cases = " ".join(f"WHEN '{name}' THEN {index}" for index, name in enumerate(PRAYER_TIMES))
    return f"CASE {column} {cases} END"


class MigrationError(RuntimeError):
    """Raised when a bundled migration script fails to apply."""


def get_db() -> sqlite3.Connection:
    """Open the roster and finance database lazily; rows come back as ``sqlite3.Row``."""
    if "isar_db" not in g:
        g.isar_db = sqlite3.connect(current_app.config["DATABASE"])
        g.isar_db.row_factory = sqlite3.Row
    return g.isar_db  # type: ignore[return-value]


def release_connection(_: object | None = None) -> None:
    conn = g.pop("isar_db", None)
    if conn is not None:
        conn.close()


def register_database(app: Flask) -> None:
    """Close the request connection on teardown and expose ``flask init-db``."""
    app.teardown_appcontext(release_connection)
    app.cli.add_command(init_db_command)


def ensure_schema(app: Flask) -> None:
    """Bring an existing database up to the latest migration."""
    apply_migrations(app, rebuild=False)


def apply_migrations(app: Flask, *, rebuild: bool) -> List[str]:
    """Run every pending script in ``MIGRATIONS`` order and return the versions applied.

    ``rebuild`` deletes the SQLite file first, which wipes rosters and statements.
    """
    database_path = Path(app.config["DATABASE"])
    if rebuild and database_path.exists():
        database_path.unlink()

    applied: List[str] = []
    with app.app_context():
        conn = get_db()
        try:
            for version in MIGRATIONS:
                if _migration_applied(conn, version):
                    continue
                _run_script(conn, MIGRATIONS_DIR / f"{version}.sql")
                applied.append(version)
            conn.commit()
        finally:
            release_connection()
    return applied


def _run_script(conn: sqlite3.Connection, script: Path) -> None:
    try:
        conn.executescript(script.read_text(encoding="utf-8"))
    except sqlite3.Error as exc:
        raise MigrationError(f"{script.name}: {exc}") from exc


def _migration_applied(conn: sqlite3.Connection, version: str) -> bool:
    # a fresh file has no marker table until 0001 creates it
    marker = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_migrations'"
    ).fetchone()
    if marker is None:
        return False
    return conn.execute("SELECT 1 FROM schema_migrations WHERE version = ?", (version,)).fetchone() is not None


def query_one(sql: str, params: Sequence[Any] | None = None) -> sqlite3.Row | None:
    db = get_db()
    cur = db.execute(sql, params or [])
    try:
        return cur.fetchone()
    finally:
        cur.close()


def query_all(sql: str, params: Sequence[Any] | None = None) -> list[sqlite3.Row]:
    db = get_db()
    cur = db.execute(sql, params or [])
    try:
        return cur.fetchall()
    finally:
        cur.close()


def execute(sql: str, params: Sequence[Any] | None = None) -> int:
    db = get_db()
    cur = db.execute(sql, params or [])
    db.commit()
    return cur.rowcount


def insert(sql: str, params: Sequence[Any] | None = None) -> int:
    db = get_db()
    cur = db.execute(sql, params or [])
    db.commit()
    return int(cur.lastrowid)


@contextmanager
def transaction() -> Iterator[sqlite3.Connection]:
    """Run a block of writes atomically.

    Statements inside the block must go through the yielded connection and
    must not commit. Any SQLite failure rolls the whole block back.
    """
    conn = get_db()
    try:
        with conn:
            yield conn
    except sqlite3.Error as exc:
        raise TransactionAbortedError(str(exc)) from exc


@click.command("init-db")
@with_appcontext
@click.option("--force", is_flag=True, help="Delete the existing database file before migrating.")
def init_db_command(force: bool) -> None:
    """Create or upgrade the iSAR schema."""
    app = current_app._get_current_object()  # type: ignore[attr-defined]
    applied = apply_migrations(app, rebuild=force)
    if applied:
        click.echo(f"Applied migrations: {', '.join(applied)}")
    else:
        click.echo("Schema already up to date.")
