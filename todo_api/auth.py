"""
Bearer-token authentication for protected endpoints.

``require_auth`` extracts ``Authorization: Bearer <token>``, verifies it
with the configured public key, and stores the caller's identity on
``flask.g`` (``g.user_id``, ``g.email``) for the wrapped view.  Failures
raise ``AuthError`` with a deliberately generic message.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

import jwt as pyjwt
from flask import current_app, g, request

from .errors import AuthError
from .jwt import decode_token

MISSING_HEADER_MESSAGE = "Missing or invalid Authorization header"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"


def extract_bearer_token() -> str | None:
    """Return the token from the Authorization header, or ``None``."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def authenticate_request() -> dict:
    """
    Verify the current request's Bearer token.

    Returns:
        The decoded claims.

    Raises:
        AuthError: If the header is missing or the token fails verification.
    """
    token = extract_bearer_token()
    if token is None:
        raise AuthError(MISSING_HEADER_MESSAGE)

    try:
        return decode_token(
            token,
            current_app.config["JWT_PUBLIC_KEY"],
            leeway=int(current_app.config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
        )
    except pyjwt.InvalidTokenError as exc:
        raise AuthError(INVALID_TOKEN_MESSAGE) from exc


def require_auth(view_func: Callable):
    """Decorator that rejects requests without a valid session token."""

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        payload = authenticate_request()
        # flask.g is torn down at the end of the request
        g.user_id = payload["user_id"]
        g.email = payload["email"]
        return view_func(*args, **kwargs)

    return wrapper
