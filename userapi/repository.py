"""Storage of user records in the ``users`` table."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from userapi import logger
from userapi.db import DatabaseError
from userapi.users import User


class RepositoryError(Exception):
    """Raised when a user cannot be read or written."""


class UserNotFoundError(RepositoryError):
    """Raised when no user has the requested id."""

    def __init__(self, message: str = "user not found"):
        super().__init__(message)


class _Connection(Protocol):
    def query(self, query: str, *args: Any) -> Sequence[Sequence[Any]]: ...


class UserRepository:
    """Reads and writes users through a connection with a ``query`` method."""

    def __init__(self, conn: _Connection):
        self.conn = conn

    def get_user_by_id(self, user_id: str) -> User:
        """Return the user with ``user_id`` or raise UserNotFoundError."""
        if user_id == "":
            raise RepositoryError("User ID is required")

        query = "SELECT id, email, password FROM users WHERE id = $1"
        logger.debug("Executing query: %s with value %s", query, user_id)

        try:
            rows = self.conn.query(query, user_id)
        except DatabaseError as exc:
            raise RepositoryError(
                f"error finding user with id = {user_id}: {exc}"
            ) from exc

        if not rows:
            raise UserNotFoundError()

        try:
            row_id, email, password = rows[0]
            return User(id=int(row_id), email=str(email), password=str(password))
        except (TypeError, ValueError) as exc:
            raise RepositoryError(f"error scanning user data: {exc}") from exc

    def save(self, user: User) -> int:
        """Insert ``user``, store the new id on it and return that id."""
        query = "INSERT INTO users (email, password) VALUES ($1, $2) RETURNING id"
        logger.debug("Running query: %s", query)

        try:
            rows = self.conn.query(query, user.email, user.password)
        except DatabaseError as exc:
            raise RepositoryError(f"error inserting new user: {exc}") from exc
        if not rows:
            raise RepositoryError("error inserting new user: no id returned")

        try:
            (new_id,) = rows[0]
            user.id = int(new_id)
        except (TypeError, ValueError) as exc:
            raise RepositoryError(f"error scanning user ID: {exc}") from exc
        logger.debug("Id of created user: %d", user.id)
        return user.id

    def delete(self, user: User) -> None:
        """Delete the row holding ``user``."""
        query = f"DELETE FROM users WHERE id = {int(user.id)}"
        logger.debug("Executing query: %s", query)

        try:
            self.conn.query(query)
        except DatabaseError as exc:
            logger.error("error deleting user with id = %d: %v", user.id, exc)
            raise RepositoryError(str(exc)) from exc

    def update(self, user: User) -> None:
        """Overwrite the non-empty email and password of the user with ``user.id``."""
        if user.email:
            self._update_field("email", user.email, user.id)
        if user.password:
            self._update_field("password", user.password, user.id)

    def _update_field(self, column: str, value: str, user_id: int) -> None:
        query = f"UPDATE users SET {column} = $1 WHERE id = $2"
        logger.debug("Executing query: %s with values %s %d", query, value, user_id)
        try:
            self.conn.query(query, value, user_id)
        except DatabaseError as exc:
            raise RepositoryError(f"error updating user {column}: {exc}") from exc

    def exists(self, user: User) -> bool:
        """Return whether a row with ``user.id`` exists; failures count as no."""
        query = "SELECT COUNT() FROM users WHERE id = $1"
        logger.debug("Executing query: %s with value %d", query, user.id)

        try:
            rows = self.conn.query(query, user.id)
        except DatabaseError as exc:
            logger.error("Error executing query: %s", exc)
            return False
        if not rows:
            return False

        try:
            (count,) = rows[0]
            return int(count) > 0
        except (TypeError, ValueError) as exc:
            logger.error("Error scanning result: %s", exc)
            return False