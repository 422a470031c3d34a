"""
To-do API Flask application factory.

``create_app`` wires configuration, the SQLAlchemy extension, the account
and task stores, the JSON error handlers and the API blueprint together.
The stores are built here, once per application, and registered on
``app.extensions`` so route handlers receive them from the application
rather than from module-level globals.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

from .config import get_config, load_jwt_keys
from .errors import register_error_handlers

# Rows handed back by the stores stay loaded after their unit of work commits
db = SQLAlchemy(session_options={"expire_on_commit": False})

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

STORES_EXTENSION = "todo_api.stores"


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    """Turn on foreign-key enforcement (and ON DELETE CASCADE) for SQLite."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if not sqlite_path or sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def get_stores():
    """Return the ``(AccountStore, TaskStore)`` pair of the current app."""
    return current_app.extensions[STORES_EXTENSION]


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the to-do API application.

    Args:
        config_name: ``"development"``, ``"testing"`` or ``"production"``.
            When ``None``, ``FLASK_ENV`` decides, defaulting to
            ``"development"``.

    Returns:
        A configured Flask application with its tables created.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    private_key, public_key = load_jwt_keys(testing=bool(app.config.get("TESTING")))
    app.config["JWT_PRIVATE_KEY"] = private_key
    app.config["JWT_PUBLIC_KEY"] = public_key

    logger.info("Creating to-do API app with config: %s", config_class.__name__)

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    db.init_app(app)

    # Imported here because these modules need ``db`` from this package
    from .routes.api import api_bp
    from .stores import AccountStore, TaskStore

    app.extensions[STORES_EXTENSION] = (
        AccountStore(db.session, password_min_length=app.config["PASSWORD_MIN_LENGTH"]),
        TaskStore(db.session),
    )

    register_error_handlers(app)
    app.register_blueprint(api_bp)

    with app.app_context():
        db.create_all()
        logger.info("Database tables created")

    return app
