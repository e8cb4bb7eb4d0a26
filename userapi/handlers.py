"""HTTP handlers for the ``/users`` endpoint."""

from __future__ import annotations

import json

from werkzeug.wrappers import Request, Response

from userapi import logger
from userapi.repository import RepositoryError, UserNotFoundError, UserRepository
from userapi.users import User


def _error(message: str, status: int) -> Response:
    return Response(
        message + "\n",
        status=status,
        content_type="text/plain; charset=utf-8",
        headers={"X-Content-Type-Options": "nosniff"},
    )


def _decode_user(request: Request) -> User:
    """Decode the first JSON value of the request body into a user."""
    body = request.get_data().decode("utf-8").lstrip()
    data, _ = json.JSONDecoder().raw_decode(body)
    if data is None:
        return User()
    return User.from_dict(data)


class UserHandler:
    """Dispatches ``/users`` requests by method to the user repository."""

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def handle_users(self, request: Request) -> Response:
        """Answer one request to the users endpoint."""
        handlers = {
            "GET": self._get_user,
            "POST": self._new_user,
            "PUT": self._update_user,
            "DELETE": self._delete_user,
        }
        handler = handlers.get(request.method)
        if handler is None:
            return _error("Method not allowed", 405)
        return handler(request)

    def __call__(self, environ, start_response):
        response = self.handle_users(Request(environ))
        return response(environ, start_response)

    def _get_user(self, request: Request) -> Response:
        logger.info("Request getUser request")
        user_id = request.args.get("id", "")
        if not user_id:
            logger.error("User ID is empty")
            return _error("User ID is required", 400)
        logger.debug("Received user ID: %s", user_id)

        try:
            user = self.repo.get_user_by_id(user_id)
        except UserNotFoundError:
            logger.error("User not found")
            return _error("User not found", 404)
        except RepositoryError as exc:
            logger.error("error finding user with id = %s: %v", user_id, exc)
            return _error("Internal server error", 500)

        body = json.dumps(user.to_dict(), separators=(",", ":")) + "\n"
        logger.info("Successfully retrieved user")
        return Response(body, status=200, content_type="application/json")

    def _new_user(self, request: Request) -> Response:
        logger.info("Received newUser request")
        try:
            user = _decode_user(request)
        except ValueError as exc:
            logger.error("error reading request body: %v", exc)
            return _error("Invalid request body", 400)
        logger.debug("Received user: %+v", user)

        if not user.email or not user.password:
            logger.error("error creating user: email or password is empty")
            return _error("email or password is empty", 400)

        try:
            self.repo.save(user)
        except RepositoryError as exc:
            logger.error("error saving user: %v", exc)
            return _error(str(exc), 500)

        logger.info("Successfully created user")
        return Response(status=200)

    def _update_user(self, request: Request) -> Response:
        logger.info("Received request to update user")
        try:
            user = _decode_user(request)
        except ValueError as exc:
            logger.error("error decoding user data: %v", exc)
            return _error("Invalid request body", 400)
        logger.debug("Received user data: %+v", user)

        try:
            self.repo.update(user)
        except RepositoryError as exc:
            logger.error("error updating user data: %v", exc)
            return _error("Internal server error", 500)

        logger.info("Successfully updated user data")
        return Response(status=200)

    def _delete_user(self, request: Request) -> Response:
        logger.info("Received request to delete user")
        user_id = request.args.get("id", "")
        if not user_id:
            logger.error("User ID is missing")
            return _error("User ID is required", 400)
        logger.info("Deleting user with ID = %s", user_id)

        try:
            user = self.repo.get_user_by_id(user_id)
        except UserNotFoundError:
            logger.info("User with id = %s not found", user_id)
            return _error("User not found", 404)
        except RepositoryError as exc:
            logger.error("error getting user with id = %s: %v", user_id, exc)
            return _error("Failed to delete user", 500)

        try:
            self.repo.delete(user)
        except RepositoryError as exc:
            logger.error("error deleting user with id = %s: %v", user_id, exc)
            return _error("Failed to delete user", 500)

        logger.info("Successfully deleted user")
        return Response(status=200)