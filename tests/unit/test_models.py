"""
Unit tests for the ``User`` and ``Task`` models.

Covers password hashing, response-safe serialisation, the unique email
constraint and the owner cascade.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from todo_api.models import Task, User

pytestmark = pytest.mark.unit


@pytest.mark.security
def test_set_password_stores_hash_not_plain_text(db_session):
    """Test that set_password stores a hash, not the original plain text."""
    # Arrange
    user = User(first_name="Alice", last_name="Smith", email="alice@example.com")

    # Act
    user.set_password("Secret123!")

    # Assert
    assert user.password_hash != "Secret123!"
    assert "Secret123!" not in user.password_hash
    assert user.check_password("Secret123!")


def test_same_password_produces_different_hashes(db_session):
    """Test that hashes are salted per user."""
    # Arrange
    first = User(first_name="A", last_name="One", email="one@example.com")
    second = User(first_name="B", last_name="Two", email="two@example.com")

    # Act
    first.set_password("SamePass1")
    second.set_password("SamePass1")

    # Assert
    assert first.password_hash != second.password_hash


def test_check_password_rejects_wrong_value(db_session):
    """Test that check_password returns False for an incorrect password."""
    # Arrange
    user = User(first_name="Bob", last_name="Jones", email="bob@example.com")
    user.set_password("CorrectPass123!")

    # Act
    result = user.check_password("WrongPass123!")

    # Assert
    assert result is False


@pytest.mark.security
def test_user_to_dict_excludes_password_hash(db_session, user_factory):
    """Test that to_dict never exposes the password hash."""
    # Arrange
    user = user_factory(first_name="Carol", last_name="White", email="carol@example.com")

    # Act
    payload = user.to_dict()

    # Assert
    assert payload["firstName"] == "Carol"
    assert payload["lastName"] == "White"
    assert payload["email"] == "carol@example.com"
    assert payload["preferredLanguage"] == "en"
    assert payload["uid"] == f"user-{user.id}"
    assert "passwordHash" not in payload
    assert "password_hash" not in payload
    assert payload["createdAt"] is not None


def test_unique_email_constraint(db_session, user_factory):
    """Test that the database rejects a duplicate email address."""
    # Arrange
    user_factory(email="dupe@example.com")
    duplicate = User(first_name="Second", last_name="User", email="dupe@example.com")
    duplicate.set_password("Secret123!")
    db_session.session.add(duplicate)

    # Act & Assert
    with pytest.raises(IntegrityError):
        db_session.session.commit()
    db_session.session.rollback()


def test_task_defaults_and_to_dict(db_session, user_factory):
    """Test that a new task is open, medium priority, with timestamps."""
    # Arrange
    user = user_factory()
    task = Task(user_id=user.id, text="Buy milk")
    db_session.session.add(task)
    db_session.session.commit()

    # Act
    data = task.to_dict()

    # Assert
    assert data["text"] == "Buy milk"
    assert data["userId"] == user.id
    assert data["completed"] is False
    assert data["priority"] == "medium"
    assert data["dueDate"] is None
    assert data["createdAt"] is not None
    assert data["updatedAt"] is not None


def test_task_due_date_serialized_as_utc(db_session, user_factory):
    """Test that due dates come back as timezone-qualified UTC strings."""
    # Arrange
    user = user_factory()
    due_date = datetime(2025, 1, 1, 12, 30, tzinfo=timezone.utc)
    task = Task(user_id=user.id, text="Due Date Task", due_date=due_date)
    db_session.session.add(task)
    db_session.session.commit()

    # Act
    data = task.to_dict()

    # Assert
    assert datetime.fromisoformat(data["dueDate"]) == due_date


def test_deleting_user_cascades_to_tasks(db_session, user_factory, task_factory):
    """Test that removing a user removes every task it owns."""
    # Arrange
    owner = user_factory()
    keeper = user_factory()
    task_factory(user_id=owner.id)
    task_factory(user_id=owner.id)
    kept = task_factory(user_id=keeper.id)

    # Act
    db_session.session.delete(owner)
    db_session.session.commit()

    # Assert
    remaining = db_session.session.scalars(select(Task)).all()
    assert [task.id for task in remaining] == [kept.id]
