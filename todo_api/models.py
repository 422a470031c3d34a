"""
Database models for the to-do API.

Two tables: ``users`` holds identity and credentials, ``tasks`` holds the
to-do items owned by a user.  Each task references its owner through a
foreign key with ``ON DELETE CASCADE``, mirrored by an ORM
``all, delete-orphan`` cascade so deleting a user through the session also
removes its tasks.

Serialisation uses camelCase keys because that is what the JSON clients
send and expect.  ``User.to_dict`` never includes the password hash.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _to_utc_iso(value: datetime | None) -> str | None:
    """
    Serialise a datetime to an ISO-8601 UTC string.

    SQLite drops timezone information, so values read back may be naive
    even though they were written as UTC.  Naive values are assumed to be
    UTC, aware values are converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


class Language(str, Enum):
    """Languages a user can pick for the interface."""

    EN = "en"
    ES = "es"
    FR = "fr"


class User(db.Model):
    """
    A registered account.

    Attributes:
        id: Auto-incrementing primary key.
        first_name: Given name (max 50 chars).
        last_name: Family name (max 50 chars).
        email: Unique address, stored exactly as supplied.  Indexed for
            login lookups and duplicate checks.
        password_hash: Werkzeug salted hash of the password.
        preferred_language: One of ``Language``; defaults to ``"en"``.
        created_at: Creation timestamp (UTC).
        updated_at: Last profile change (UTC).
    """

    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    first_name: str = db.Column(db.String(50), nullable=False)
    last_name: str = db.Column(db.String(50), nullable=False)
    email: str = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    preferred_language: str = db.Column(
        db.String(5),
        nullable=False,
        default=Language.EN.value,
    )
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    tasks = db.relationship(
        "Task",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def set_password(self, password: str) -> None:
        """
        Hash and store a plain-text password.

        Werkzeug's ``generate_password_hash`` salts every hash, so two users
        with the same password never share a stored value.
        """
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Return ``True`` if *password* matches the stored hash."""
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict[str, Any]:
        """
        Return a response-safe dictionary.

        ``password_hash`` is intentionally left out so the result can be
        returned directly from an endpoint.
        """
        return {
            "id": self.id,
            "uid": f"user-{self.id}",
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "preferredLanguage": self.preferred_language,
            "createdAt": _to_utc_iso(self.created_at),
            "updatedAt": _to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"


class Task(db.Model):
    """
    A to-do item owned by one user.

    Attributes:
        id: Auto-incrementing primary key.
        user_id: Owner; cascades on user deletion.
        text: What needs doing.
        completed: Completion flag.
        priority: Free-form label, ``"medium"`` unless given.
        due_date: Optional deadline (UTC).
        created_at: Creation timestamp (UTC).
        updated_at: Last modification (UTC).
    """

    __tablename__ = "tasks"

    DEFAULT_PRIORITY = "medium"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text: str = db.Column(db.String(500), nullable=False)
    completed: bool = db.Column(db.Boolean, nullable=False, default=False)
    priority: str = db.Column(
        db.String(20),
        nullable=False,
        default=DEFAULT_PRIORITY,
    )
    due_date: datetime | None = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    owner = db.relationship("User", back_populates="tasks")

    def to_dict(self) -> dict[str, Any]:
        """Serialise the task with UTC ISO-8601 timestamps."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "text": self.text,
            "completed": self.completed,
            "priority": self.priority,
            "dueDate": _to_utc_iso(self.due_date),
            "createdAt": _to_utc_iso(self.created_at),
            "updatedAt": _to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.text}>"
