"""
Request validation and typed partial updates.

``ProfileUpdate`` and ``TaskUpdate`` describe a partial change: every field
starts out as ``UNSET`` and only the keys present in the request body are
filled in.  ``changes()`` returns just those fields, keyed by model
attribute, so the stores apply a fixed, known set of column assignments
instead of building update statements from arbitrary input.  Keys the
structures do not know about (``id``, ``userId``, timestamps, password
hashes) are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any

from .errors import ValidationError
from .models import Language

NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 120
TEXT_MAX_LENGTH = 500
PRIORITY_MAX_LENGTH = 20
# Largest value a signed 64-bit INTEGER primary key can hold
MAX_ID = 2**63 - 1

# Deliberately loose: one "@", no whitespace, a dot in the domain
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

VALID_LANGUAGES = [language.value for language in Language]


class _Unset:
    """Marker for a field the request did not mention."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def is_blank(value: Any) -> bool:
    """True for ``None``, empty values and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_name(value: Any, label: str) -> str:
    """Return a stripped, non-blank name no longer than ``NAME_MAX_LENGTH``."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} must be a non-empty string")
    value = value.strip()
    if len(value) > NAME_MAX_LENGTH:
        raise ValidationError(f"{label} must be {NAME_MAX_LENGTH} characters or less")
    return value


def validate_email(value: Any) -> str:
    if not isinstance(value, str) or not EMAIL_PATTERN.match(value.strip()):
        raise ValidationError("A valid email address is required")
    value = value.strip()
    if len(value) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"Email must be {EMAIL_MAX_LENGTH} characters or less")
    return value


def validate_language(value: Any) -> str:
    if value not in VALID_LANGUAGES:
        raise ValidationError(
            f"Invalid preferredLanguage. Must be one of: {VALID_LANGUAGES}"
        )
    return value


def validate_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Task text must be a non-empty string")
    if len(value) > TEXT_MAX_LENGTH:
        raise ValidationError(f"Task text must be {TEXT_MAX_LENGTH} characters or less")
    return value


def validate_priority(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Priority must be a non-empty string")
    value = value.strip()
    if len(value) > PRIORITY_MAX_LENGTH:
        raise ValidationError(
            f"Priority must be {PRIORITY_MAX_LENGTH} characters or less"
        )
    return value


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_due_date(value: Any) -> datetime | None:
    """
    Parse an optional ISO-8601 string (``Z`` suffix allowed) into UTC.

    ``None`` and empty strings mean "no due date".  Datetime instances are
    accepted as-is so stores can be called directly from Python.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str):
        raise ValidationError(
            "Invalid dueDate format. Use ISO format (YYYY-MM-DDTHH:MM:SS)"
        )
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(
            "Invalid dueDate format. Use ISO format (YYYY-MM-DDTHH:MM:SS)"
        ) from exc
    return ensure_utc(parsed)


def parse_id(value: Any, label: str) -> int:
    """Coerce a positive integer identifier from JSON input."""
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a positive integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{label} must be a positive integer") from exc
    if not is_storable_id(parsed):
        raise ValidationError(f"{label} must be a positive integer")
    return parsed


def is_storable_id(value: int) -> bool:
    """True when *value* fits an INTEGER primary key."""
    return 0 < value <= MAX_ID


@dataclass(frozen=True)
class _PartialUpdate:
    """Shared behaviour for the partial-update structures."""

    def changes(self) -> dict[str, Any]:
        """Return the supplied fields only, keyed by model attribute."""
        return {
            field.name: getattr(self, field.name)
            for field in fields(self)
            if getattr(self, field.name) is not UNSET
        }

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass(frozen=True)
class ProfileUpdate(_PartialUpdate):
    """Editable profile fields."""

    first_name: Any = UNSET
    last_name: Any = UNSET
    preferred_language: Any = UNSET

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ProfileUpdate:
        values: dict[str, Any] = {}
        if "firstName" in data:
            values["first_name"] = validate_name(data["firstName"], "firstName")
        if "lastName" in data:
            values["last_name"] = validate_name(data["lastName"], "lastName")
        if "preferredLanguage" in data:
            values["preferred_language"] = validate_language(data["preferredLanguage"])
        return cls(**values)


@dataclass(frozen=True)
class TaskUpdate(_PartialUpdate):
    """Editable task fields.  ``due_date=None`` clears the due date."""

    completed: Any = UNSET
    text: Any = UNSET
    priority: Any = UNSET
    due_date: Any = UNSET

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TaskUpdate:
        values: dict[str, Any] = {}
        if "completed" in data:
            if not isinstance(data["completed"], bool):
                raise ValidationError("completed must be a boolean")
            values["completed"] = data["completed"]
        if "text" in data:
            values["text"] = validate_text(data["text"])
        if "priority" in data:
            values["priority"] = validate_priority(data["priority"])
        if "dueDate" in data:
            values["due_date"] = parse_due_date(data["dueDate"])
        return cls(**values)
