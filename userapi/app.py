"""Application wiring: configuration, database, routes and the HTTP server."""

from __future__ import annotations

import argparse

from werkzeug.serving import run_simple
from werkzeug.wrappers import Request, Response

from userapi import config, db, logger
from userapi.config import ConfigError
from userapi.db import Database, DatabaseError
from userapi.handlers import UserHandler
from userapi.repository import UserRepository

USERS_PATH = "/users"


def _not_found(environ, start_response):
    response = Response(
        "404 page not found\n",
        status=404,
        content_type="text/plain; charset=utf-8",
        headers={"X-Content-Type-Options": "nosniff"},
    )
    return response(environ, start_response)


def create_app(database: Database):
    """Return a WSGI application serving ``/users`` from ``database``."""
    handler = UserHandler(UserRepository(database))

    def application(environ, start_response):
        if Request(environ).path == USERS_PATH:
            return handler(environ, start_response)
        return _not_found(environ, start_response)

    return application


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError as exc:
        raise ConfigError(f"invalid PORT value {value!r}") from exc
    if not 0 <= port <= 65535:
        raise ConfigError(f"invalid PORT value {value!r}")
    return port


def start() -> None:
    """Load configuration, connect and migrate the database, then serve forever."""
    try:
        config.load_config()
    except ConfigError as exc:
        logger.error("error loading config: %s", exc)
        raise

    try:
        db_config = config.get_db_config()
    except ConfigError as exc:
        logger.error("error getting db config: %s", exc)
        raise

    try:
        database = db.connect(db_config)
    except DatabaseError as exc:
        logger.error("error connecting to database: %s", exc)
        raise

    try:
        try:
            db.run_migration()
        except DatabaseError as exc:
            logger.error("error migrating database: %s", exc)
            raise

        application = create_app(database)

        try:
            port = config.get_env("PORT")
        except ConfigError as exc:
            logger.error("error getting PORT environment variable: %s", exc)
            raise

        logger.info("Starting server on port :%s", port)
        try:
            run_simple("0.0.0.0", _parse_port(port), application)
        except OSError as exc:
            logger.error("error starting server: %s", exc)
            raise
    finally:
        db.close()


def main(argv=None) -> int:
    """Run the users API server; return a non-zero code if it cannot start."""
    parser = argparse.ArgumentParser(
        prog="userapi",
        description="Serve the users API configured by the .env file.",
    )
    parser.parse_args(argv)

    logger.info("Starting app...")
    try:
        start()
    except (ConfigError, DatabaseError, OSError) as exc:
        logger.error("error starting app: %s", exc)
        return 1
    return 0