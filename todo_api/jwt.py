"""
Session token issuance and verification.

Tokens are RS256-signed JWTs: the application signs with its private key
and verifies with the matching public key.

Claims:
    - ``user_id``    -- integer primary key of the authenticated user.
    - ``email``      -- the account email.
    - ``first_name`` / ``last_name`` -- carried so clients can greet the
      user without an extra profile request.
    - ``iat`` / ``exp`` -- issued-at and expiry as epoch seconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

ALGORITHM = "RS256"
REQUIRED_TOKEN_CLAIMS = ["user_id", "email", "iat", "exp"]


def create_token(
    user_id: int,
    email: str,
    first_name: str,
    last_name: str,
    private_key: str,
    expiry_hours: int,
) -> str:
    """
    Create an RS256-signed session token.

    Args:
        user_id: Primary key of the user.  Must be positive.
        email: Account email.  Must be non-blank.
        first_name: Given name embedded for display.
        last_name: Family name embedded for display.
        private_key: PEM-encoded RSA private key.
        expiry_hours: Hours from now until the token expires.

    Returns:
        A compact JWS string for use as a Bearer token.

    Raises:
        ValueError: If *user_id* is not positive or *email* is blank.
    """
    if int(user_id) <= 0:
        raise ValueError("user_id must be a positive integer")
    if not isinstance(email, str) or not email.strip():
        raise ValueError("email must be a non-empty string")

    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(hours=int(expiry_hours))

    payload: dict[str, Any] = {
        "user_id": int(user_id),
        "email": email,
        "first_name": first_name,
        "last_name": last_name,
        # RFC 7519 NumericDate: seconds since the epoch
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, private_key, algorithm=ALGORITHM)


def decode_token(token: str, public_key: str, leeway: int = 30) -> dict[str, Any]:
    """
    Verify a session token and return its claims.

    Checks the signature, expiry, presence of the required claims, and
    that ``user_id`` is a positive int and ``email`` a non-blank string.

    Raises:
        jwt.InvalidTokenError: On any verification failure.
    """
    payload = jwt.decode(
        token,
        public_key,
        algorithms=[ALGORITHM],
        options={"require": REQUIRED_TOKEN_CLAIMS},
        leeway=leeway,
    )
    user_id = payload.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        raise jwt.InvalidTokenError("Invalid user_id claim")
    if not isinstance(payload.get("email"), str) or not payload["email"].strip():
        raise jwt.InvalidTokenError("Invalid email claim")
    return payload
