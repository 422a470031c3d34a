"""
Configuration for the to-do API.

Follows Flask's class-based configuration pattern: ``Config`` holds the
defaults shared by every environment, and ``DevelopmentConfig``,
``TestingConfig`` and ``ProductionConfig`` override only what differs.
``get_config`` resolves the class from an explicit name or ``FLASK_ENV``.

The storage backend is chosen through ``SQLALCHEMY_DATABASE_URI``: tests run
against an in-memory SQLite database, everything else defaults to a SQLite
file under ``instance/`` and accepts any SQLAlchemy URL via ``DATABASE_URL``.

Signing keys come from ``JWT_PRIVATE_KEY`` / ``JWT_PUBLIC_KEY`` (raw PEM) or
their ``*_PATH`` variants.  Under the testing config a ``TEST_`` prefix on
either pair takes precedence.
"""

from __future__ import annotations

import os
from pathlib import Path

from sqlalchemy.pool import StaticPool

BASE_DIR = Path(__file__).resolve().parent


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def _read_pem(var: str) -> str | None:
    """
    Return the PEM named by *var*, from the raw variable or ``<var>_PATH``.

    Returns ``None`` when neither is set.
    """
    if _env(var):
        return _env(var)

    key_path = _env(f"{var}_PATH")
    if not key_path:
        return None
    try:
        return Path(key_path).read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"Unable to read {var}_PATH '{key_path}'") from exc


def load_jwt_keys(*, testing: bool) -> tuple[str, str]:
    """
    Resolve the ``(private, public)`` PEM pair used to sign session tokens.

    Raises:
        RuntimeError: If either key is missing or unreadable.
    """
    prefixes = ["TEST_", ""] if testing else [""]
    for prefix in prefixes:
        private_key = _read_pem(f"{prefix}JWT_PRIVATE_KEY")
        public_key = _read_pem(f"{prefix}JWT_PUBLIC_KEY")
        if private_key is None and public_key is None:
            continue
        if private_key is None or public_key is None:
            raise RuntimeError(
                f"Incomplete key pair: set both {prefix}JWT_PRIVATE_KEY and "
                f"{prefix}JWT_PUBLIC_KEY (or their _PATH variants)"
            )
        return private_key, public_key

    raise RuntimeError("Missing JWT keys: set JWT_PRIVATE_KEY and JWT_PUBLIC_KEY")


class Config:
    """Defaults shared by every environment; each can be overridden by env."""

    SECRET_KEY: str = os.environ.get(
        "SECRET_KEY", "todo-api-dev-secret-change-in-production"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'todo.db'}",
    )

    # Session tokens stay valid for a day
    JWT_EXPIRY_HOURS: int = int(os.environ.get("JWT_EXPIRY_HOURS", "24"))
    # Seconds of tolerance for clock differences between issuer and verifier
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))

    PASSWORD_MIN_LENGTH: int = int(os.environ.get("PASSWORD_MIN_LENGTH", "6"))


class DevelopmentConfig(Config):
    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    In-memory SQLite for the test suite.

    ``StaticPool`` keeps a single connection alive, otherwise every new
    connection would see a fresh, empty in-memory database.
    """

    DEBUG: bool = True
    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS: dict = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }


class ProductionConfig(Config):
    DEBUG: bool = False
    TESTING: bool = False


def get_config(env: str | None = None) -> type[Config]:
    """
    Resolve a configuration class by environment name.

    ``None`` reads ``FLASK_ENV``; unknown names fall back to development.
    """
    env = env or os.environ.get("FLASK_ENV", "development")
    if env == "testing":
        return TestingConfig
    if env == "production":
        return ProductionConfig
    return DevelopmentConfig
