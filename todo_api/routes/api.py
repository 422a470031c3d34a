"""
REST endpoints for accounts and tasks.

Every response uses the envelope ``{"success": bool, ...}``; errors are
raised as ``ApiError`` subclasses and rendered by the application's error
handlers.

Endpoints:
    GET    /health                  - Liveness probe (public)
    POST   /register                - Create an account, returns a token
    POST   /login                   - Authenticate, returns a token
    GET    /profile                 - Current user's profile
    PUT    /profile                 - Partial profile update
    GET    /users                   - List all accounts (public)
    GET    /tasks/<user_id>         - Owner's tasks, newest first
    POST   /tasks                   - Create a task
    PUT    /tasks/<task_id>         - Partial task update
    DELETE /tasks/<task_id>         - Delete a task
    GET    /tasks/<user_id>/stats   - Total / completed / remaining counts

Task routes require a session token and only ever touch the caller's rows;
another user's id or task answers 404 so existence is not leaked.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from flask import Blueprint, Response, current_app, g, jsonify, request

from .. import get_stores
from ..auth import require_auth
from ..errors import NotFoundError, ValidationError
from ..jwt import create_token
from ..models import User
from ..validation import ProfileUpdate, TaskUpdate, parse_id

logger = logging.getLogger(__name__)

api_bp = Blueprint("todo_api", __name__)


# =====================================================================
# Helper Functions
# =====================================================================


def _json_body() -> dict[str, Any]:
    """Return the JSON object body, or an empty dict for anything else."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _success(status_code: int = 200, **payload: Any) -> tuple[Response, int]:
    return jsonify({"success": True, **payload}), status_code


def _issue_token(user: User) -> str:
    return create_token(
        user_id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        private_key=current_app.config["JWT_PRIVATE_KEY"],
        expiry_hours=current_app.config["JWT_EXPIRY_HOURS"],
    )


def _ensure_owner(user_id: int) -> None:
    """Treat any user id other than the caller's as nonexistent."""
    if user_id != g.user_id:
        raise NotFoundError("User not found")


# =====================================================================
# Account Endpoints
# =====================================================================


@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Public liveness probe."""
    return _success(
        status="healthy",
        service="todo-api",
        environment=os.getenv("ENVIRONMENT", "unknown"),
    )


@api_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new account.

    Accepts ``firstName``, ``lastName``, ``email``, ``password``, an
    optional ``confirmPassword`` and an optional ``preferredLanguage``
    (``selectedLanguage`` and ``language`` are accepted as older aliases).

    Returns:
        201 with ``user`` and ``token``; 400 on validation failure or a
        duplicate email.
    """
    data = _json_body()
    accounts, _ = get_stores()

    user = accounts.register(
        first_name=data.get("firstName"),
        last_name=data.get("lastName"),
        email=data.get("email"),
        password=data.get("password"),
        confirm_password=data.get("confirmPassword"),
        preferred_language=(
            data.get("preferredLanguage")
            or data.get("selectedLanguage")
            or data.get("language")
        ),
    )
    return _success(
        201,
        message="User registered successfully",
        user=user.to_dict(),
        token=_issue_token(user),
    )


@api_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate with ``email`` and ``password``.

    Returns:
        200 with ``user`` and ``token``; 400 if a field is missing; 401
        with a generic message for unknown email or wrong password.
    """
    data = _json_body()
    accounts, _ = get_stores()

    user = accounts.authenticate(data.get("email"), data.get("password"))
    return _success(
        message="Login successful",
        user=user.to_dict(),
        token=_issue_token(user),
    )


@api_bp.route("/profile", methods=["GET"])
@require_auth
def get_profile() -> tuple[Response, int]:
    accounts, _ = get_stores()
    return _success(user=accounts.get_user(g.user_id).to_dict())


@api_bp.route("/profile", methods=["PUT"])
@require_auth
def update_profile() -> tuple[Response, int]:
    """Update any of ``firstName``, ``lastName``, ``preferredLanguage``."""
    accounts, _ = get_stores()
    update = ProfileUpdate.from_json(_json_body())
    user = accounts.update_profile(g.user_id, update)
    return _success(message="Profile updated successfully", user=user.to_dict())


@api_bp.route("/users", methods=["GET"])
def list_users() -> tuple[Response, int]:
    """
    List every account.

    Unauthenticated, so anyone can enumerate registered emails.  Kept for
    compatibility with existing clients.
    """
    logger.warning("Unauthenticated user listing requested from %s", request.remote_addr)
    accounts, _ = get_stores()
    return _success(users=[user.to_dict() for user in accounts.list_users()])


# =====================================================================
# Task Endpoints
# =====================================================================


@api_bp.route("/tasks/<int:user_id>", methods=["GET"])
@require_auth
def list_tasks(user_id: int) -> tuple[Response, int]:
    _ensure_owner(user_id)
    _, tasks = get_stores()

    rows = tasks.list_tasks(user_id)
    return _success(tasks=[task.to_dict() for task in rows], count=len(rows))


@api_bp.route("/tasks", methods=["POST"])
@require_auth
def create_task() -> tuple[Response, int]:
    """
    Create a task from ``text`` with optional ``priority`` and ``dueDate``.

    ``userId`` defaults to the caller; any other owner answers 404.
    """
    data = _json_body()
    if not data:
        raise ValidationError("Request body must be a JSON object")

    user_id = parse_id(data.get("userId", g.user_id), "userId")
    _ensure_owner(user_id)
    _, tasks = get_stores()

    task = tasks.create_task(
        user_id=user_id,
        text=data.get("text"),
        priority=data.get("priority"),
        due_date=data.get("dueDate"),
    )
    return _success(201, message="Task created successfully", task=task.to_dict())


@api_bp.route("/tasks/<int:task_id>", methods=["PUT"])
@require_auth
def update_task(task_id: int) -> tuple[Response, int]:
    """Apply any of ``completed``, ``text``, ``priority``, ``dueDate``."""
    _, tasks = get_stores()
    update = TaskUpdate.from_json(_json_body())
    task = tasks.update_task(task_id, update, owner_id=g.user_id)
    return _success(message="Task updated successfully", task=task.to_dict())


@api_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
@require_auth
def delete_task(task_id: int) -> tuple[Response, int]:
    _, tasks = get_stores()
    tasks.delete_task(task_id, owner_id=g.user_id)
    return _success(message="Task deleted successfully")


@api_bp.route("/tasks/<int:user_id>/stats", methods=["GET"])
@require_auth
def task_stats(user_id: int) -> tuple[Response, int]:
    _ensure_owner(user_id)
    _, tasks = get_stores()
    return _success(stats=tasks.get_stats(user_id))
