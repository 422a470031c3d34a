"""
Account and task stores.

The stores own every read and write against the ``users`` and ``tasks``
tables.  They are constructed explicitly by ``create_app`` around a
SQLAlchemy session and handed to the route layer through
``app.extensions``, so tests can build isolated instances against any
engine.

Every operation runs inside ``_unit_of_work``: the session is committed on
success and rolled back on any error, and SQLAlchemy failures surface as
``InternalError`` after being logged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import AuthError, ConflictError, InternalError, NotFoundError, ValidationError
from .models import Language, Task, User, utcnow
from .validation import (
    ProfileUpdate,
    TaskUpdate,
    is_blank,
    is_storable_id,
    parse_due_date,
    validate_email,
    validate_language,
    validate_name,
    validate_priority,
    validate_text,
)

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class _Store:
    """Base class holding the session and the unit-of-work helper."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _unit_of_work(self) -> Iterator[Session]:
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Storage failure in %s: %s", type(self).__name__, exc)
            raise InternalError() from exc
        except Exception:
            self.session.rollback()
            raise


class AccountStore(_Store):
    """Registration, authentication and profile access for ``User`` rows."""

    def __init__(self, session: Session, password_min_length: int = 6) -> None:
        super().__init__(session)
        self.password_min_length = password_min_length

    def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        confirm_password: str | None = None,
        preferred_language: str | None = None,
    ) -> User:
        """
        Create a new account.

        Raises:
            ValidationError: Missing field, password mismatch or too short,
                bad name/email/language.
            ConflictError: The email is already registered, whether caught
                by the pre-check or by the unique constraint at insert time.
        """
        if any(is_blank(value) for value in (first_name, last_name, email, password)):
            raise ValidationError("All fields are required")
        if not isinstance(password, str):
            raise ValidationError("Password must be a string")
        if confirm_password and password != confirm_password:
            raise ValidationError("Passwords do not match")
        if len(password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters long"
            )

        first_name = validate_name(first_name, "firstName")
        last_name = validate_name(last_name, "lastName")
        email = validate_email(email)
        language = validate_language(preferred_language or Language.EN.value)

        with self._unit_of_work() as session:
            if session.scalar(select(User.id).where(User.email == email)) is not None:
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

            user = User(
                first_name=first_name,
                last_name=last_name,
                email=email,
                preferred_language=language,
            )
            user.set_password(password)
            session.add(user)
            try:
                session.flush()
            except IntegrityError as exc:
                # Two identical registrations raced past the pre-check
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from exc

        logger.info("Registered user id=%s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Return the user whose credentials match.

        Unknown email and wrong password raise the same ``AuthError`` so the
        response cannot be used to discover which emails are registered.
        """
        if not isinstance(email, str) or not isinstance(password, str):
            raise ValidationError("Email and password are required")
        if is_blank(email) or is_blank(password):
            raise ValidationError("Email and password are required")

        with self._unit_of_work() as session:
            user = session.scalar(select(User).where(User.email == email.strip()))

        if user is None or not user.check_password(password):
            logger.info("Failed login attempt for %s", email)
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)
        return user

    def get_user(self, user_id: int) -> User:
        with self._unit_of_work() as session:
            user = self._find_user(session, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: int, update: ProfileUpdate) -> User:
        """Apply *update* to the user and refresh ``updated_at``."""
        with self._unit_of_work() as session:
            user = self._find_user(session, user_id)
            if user is None:
                raise NotFoundError("User not found")
            for name, value in update.changes().items():
                setattr(user, name, value)
            user.updated_at = utcnow()
        return user

    @staticmethod
    def _find_user(session: Session, user_id: int) -> User | None:
        if not is_storable_id(user_id):
            return None
        return session.get(User, user_id)

    def list_users(self) -> list[User]:
        with self._unit_of_work() as session:
            return list(session.scalars(select(User).order_by(User.id)).all())

    def delete_user(self, user_id: int) -> None:
        """Remove the user; its tasks go with it."""
        with self._unit_of_work() as session:
            user = self._find_user(session, user_id)
            if user is None:
                raise NotFoundError("User not found")
            session.delete(user)


class TaskStore(_Store):
    """CRUD and statistics for ``Task`` rows."""

    def list_tasks(self, user_id: int) -> list[Task]:
        """Tasks owned by *user_id*, newest first."""
        stmt = (
            select(Task)
            .where(Task.user_id == user_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        with self._unit_of_work() as session:
            return list(session.scalars(stmt).all())

    def create_task(
        self,
        user_id: int | None,
        text: str | None,
        priority: str | None = None,
        due_date: str | datetime | None = None,
    ) -> Task:
        """
        Create an open task.

        Raises:
            ValidationError: *user_id* or *text* missing, or a field is
                malformed.
            NotFoundError: The owner does not exist.
        """
        if user_id is None or is_blank(text):
            raise ValidationError("userId and text are required")

        task = Task(
            user_id=user_id,
            text=validate_text(text),
            completed=False,
            priority=Task.DEFAULT_PRIORITY if priority is None else validate_priority(priority),
            due_date=parse_due_date(due_date),
        )
        with self._unit_of_work() as session:
            if not is_storable_id(user_id) or session.get(User, user_id) is None:
                raise NotFoundError("User not found")
            session.add(task)
        return task

    def get_task(self, task_id: int, owner_id: int | None = None) -> Task:
        with self._unit_of_work() as session:
            task = self._find_task(session, task_id, owner_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def update_task(
        self, task_id: int, update: TaskUpdate, owner_id: int | None = None
    ) -> Task:
        """
        Apply the supplied fields of *update* and refresh ``updated_at``.

        When *owner_id* is given, tasks belonging to anyone else are treated
        as missing.
        """
        with self._unit_of_work() as session:
            task = self._find_task(session, task_id, owner_id)
            if task is None:
                raise NotFoundError("Task not found")
            for name, value in update.changes().items():
                setattr(task, name, value)
            task.updated_at = utcnow()
        return task

    def delete_task(self, task_id: int, owner_id: int | None = None) -> None:
        with self._unit_of_work() as session:
            task = self._find_task(session, task_id, owner_id)
            if task is None:
                raise NotFoundError("Task not found")
            session.delete(task)

    def get_stats(self, user_id: int) -> dict[str, Any]:
        """Return ``total``, ``completed`` and ``remaining`` counts."""
        stmt = select(Task.completed, func.count(Task.id)).where(
            Task.user_id == user_id
        ).group_by(Task.completed)
        with self._unit_of_work() as session:
            counts = {bool(completed): count for completed, count in session.execute(stmt)}

        completed = counts.get(True, 0)
        remaining = counts.get(False, 0)
        return {
            "total": completed + remaining,
            "completed": completed,
            "remaining": remaining,
        }

    @staticmethod
    def _find_task(session: Session, task_id: int, owner_id: int | None) -> Task | None:
        """Load a task, scoped to *owner_id* when given."""
        if not is_storable_id(task_id):
            return None
        stmt = select(Task).where(Task.id == task_id)
        if owner_id is not None:
            stmt = stmt.where(Task.user_id == owner_id)
        return session.scalar(stmt)
