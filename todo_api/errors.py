"""
Error taxonomy and JSON error handlers.

Store operations raise one of the ``ApiError`` subclasses below; the
handlers registered by ``register_error_handlers`` turn them into the
uniform ``{"success": false, "error": "..."}`` envelope.  Anything that is
not an ``ApiError`` is logged and reported as a generic 500 so that stack
traces, hashes and driver messages never reach the client.
"""

from __future__ import annotations

import logging

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Invalid request"


class ConflictError(ApiError):
    """The resource already exists (duplicate email)."""

    status_code = 400
    default_message = "User with this email already exists"


class AuthError(ApiError):
    """Bad credentials or a missing / invalid / expired token."""

    status_code = 401
    default_message = "Invalid email or password"


class NotFoundError(ApiError):
    """No row matched the request."""

    status_code = 404
    default_message = "Resource not found"


class InternalError(ApiError):
    """Storage or otherwise unexpected failure."""

    status_code = 500


def error_response(message: str, status_code: int) -> tuple[Response, int]:
    """Build the standard error envelope."""
    return jsonify({"success": False, "error": message}), status_code


def register_error_handlers(app: Flask) -> None:
    """Attach the JSON error handlers to *app*."""

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError) -> tuple[Response, int]:
        if error.status_code >= 500:
            logger.error("Internal error: %s", error.message, exc_info=error.__cause__)
            return error_response(InternalError.default_message, error.status_code)
        return error_response(error.message, error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException) -> tuple[Response, int]:
        return error_response(error.description or error.name, error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception) -> tuple[Response, int]:
        logger.exception("Unhandled exception: %s", error)
        return error_response(InternalError.default_message, 500)
