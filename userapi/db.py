"""The shared database connection, queries and schema migrations."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from userapi import logger
from userapi.config import DBConfig, get_db_config

MAX_RETRIES = 5
RETRY_DELAY = 2.0

_PLACEHOLDER = re.compile(r"\$(\d+)")
_LONE_COLON = re.compile(r"(?<![:\\]):(?!:)")
_MIGRATION_NAME = re.compile(r"^([0-9]+)_(.*)\.(up|down)\.(.*)$")

_opened: Database | None = None


class DatabaseError(Exception):
    """Raised when the database cannot be reached or a statement fails."""


def _bind(query: str, args: tuple) -> tuple[Any, dict[str, Any]]:
    escaped = _LONE_COLON.sub(r"\\:", query)
    statement = _PLACEHOLDER.sub(lambda m: f":p{m.group(1)}", escaped)
    params = {f"p{number}": value for number, value in enumerate(args, start=1)}
    return text(statement), params


class Database:
    """A pooled connection to a SQL database."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def ping(self) -> None:
        """Check that the database answers."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise DatabaseError(str(exc)) from exc

    def query(self, query: str, *args) -> list[tuple]:
        """Run a statement with ``$N`` placeholders and return its rows."""
        self.ping()
        statement, params = _bind(query, args)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement, params)
                if not result.returns_rows:
                    return []
                return [tuple(row) for row in result]
        except SQLAlchemyError as exc:
            raise DatabaseError(str(exc)) from exc

    def close(self) -> None:
        """Release every pooled connection."""
        self.engine.dispose()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def connection_url(config: DBConfig) -> URL:
    """Return the PostgreSQL URL described by ``config``, with SSL disabled."""
    try:
        port = int(config.port)
    except ValueError as exc:
        raise DatabaseError(f"invalid database port {config.port!r}") from exc
    return URL.create(
        "postgresql",
        username=config.user,
        password=config.password,
        host=config.host,
        port=port,
        database=config.db_name,
        query={"sslmode": "disable"},
    )


def _open(url: URL) -> Database:
    try:
        database = Database(create_engine(url))
    except (SQLAlchemyError, ImportError) as exc:
        raise DatabaseError(str(exc)) from exc
    try:
        database.ping()
    except DatabaseError:
        database.close()
        raise
    return database


def connect(config: DBConfig) -> Database:
    """Open the shared connection, retrying a few times before giving up."""
    global _opened
    url = connection_url(config)
    logger.info("Attempt to connect to database...")
    failure: DatabaseError | None = None
    for _ in range(MAX_RETRIES):
        try:
            database = _open(url)
        except DatabaseError as exc:
            failure = exc
            logger.info("Failed to connect: %s. Retrying...", exc)
            time.sleep(RETRY_DELAY)
            continue
        _opened = database
        logger.info("Initialized database connection")
        return database
    raise failure or DatabaseError("could not connect to database")


def close() -> None:
    """Close the shared connection if one is open."""
    global _opened
    if _opened is None:
        return
    _opened.close()
    _opened = None
    logger.info("Closed database connection")


def get_database() -> Database:
    """Return the shared connection, opening it from the environment if needed."""
    if _opened is None:
        connect(get_db_config())
    return _opened


@dataclass(frozen=True)
class _Migration:
    version: int
    name: str
    path: Path


def _read_migrations(directory: Path) -> list[_Migration]:
    if not directory.is_dir():
        raise DatabaseError(f"migration directory {directory} does not exist")
    found: dict[int, _Migration] = {}
    for path in directory.iterdir():
        match = _MIGRATION_NAME.match(path.name)
        if not match or match.group(3) != "up":
            continue
        version = int(match.group(1))
        if version in found:
            raise DatabaseError(f"duplicate migration file: {path.name}")
        found[version] = _Migration(version, match.group(2), path)
    return sorted(found.values(), key=lambda migration: migration.version)


def _current_version(conn) -> int | None:
    conn.execute(
        text(
            "CREATE TABLE IF NOT EXISTS schema_migrations "
            "(version bigint NOT NULL PRIMARY KEY, dirty boolean NOT NULL)"
        )
    )
    row = conn.execute(text("SELECT version, dirty FROM schema_migrations")).first()
    if row is None:
        return None
    version, dirty = int(row[0]), bool(row[1])
    if dirty:
        raise DatabaseError(f"Dirty database version {version}. Fix and force version.")
    return version


def _apply(engine: Engine, migration: _Migration) -> None:
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM schema_migrations"))
        conn.execute(
            text("INSERT INTO schema_migrations (version, dirty) VALUES (:version, :dirty)"),
            {"version": migration.version, "dirty": True},
        )
    body = migration.path.read_text()
    if body.strip():
        with engine.begin() as conn:
            conn.exec_driver_sql(body)
    with engine.begin() as conn:
        conn.execute(
            text("UPDATE schema_migrations SET dirty = :dirty WHERE version = :version"),
            {"version": migration.version, "dirty": False},
        )


def run_migration(directory="migrations") -> int:
    """Apply pending ``*.up.sql`` migrations and return how many were applied.

    Failures while applying are logged, not raised; a missing connection or
    an unreadable migration directory raises DatabaseError.
    """
    logger.info("Running migration...")
    if _opened is None:
        raise DatabaseError("error running migration: database connection is closed")
    migrations = _read_migrations(Path(directory))
    engine = _opened.engine
    applied = 0
    try:
        if not migrations:
            raise DatabaseError(f"no migration files found in {directory}")
        with engine.begin() as conn:
            current = _current_version(conn)
        pending = [m for m in migrations if current is None or m.version > current]
        if not pending:
            logger.info("Database schema is up to date")
            return 0
        for migration in pending:
            _apply(engine, migration)
            applied += 1
    except (SQLAlchemyError, DatabaseError, OSError) as exc:
        logger.error(str(exc))
        return applied
    logger.info("Successfully migrated database schema")
    return applied