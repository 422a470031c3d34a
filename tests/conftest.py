"""
Shared pytest fixtures for the to-do API test suite.

Provides the Flask application, test client, a clean database per test,
factories for users and tasks, and Bearer headers for authenticated calls.
The application runs against an in-memory SQLite database and signs
tokens with an RSA pair generated for this test process.
"""

from __future__ import annotations

import os
from datetime import datetime

import pytest
from faker import Faker

from tests.helpers import TEST_PRIVATE_KEY, TEST_PUBLIC_KEY, auth_headers, create_test_token

# Set testing environment before the app is created
os.environ["FLASK_ENV"] = "testing"
os.environ["TEST_JWT_PRIVATE_KEY"] = TEST_PRIVATE_KEY
os.environ["TEST_JWT_PUBLIC_KEY"] = TEST_PUBLIC_KEY

from todo_api import STORES_EXTENSION, create_app, db  # noqa: E402
from todo_api.models import Task, User  # noqa: E402
from todo_api.stores import AccountStore, TaskStore  # noqa: E402

fake = Faker()

DEFAULT_PASSWORD = "password123"


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app():
    """Create the application once for the whole test session."""
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Fresh test client per test so no request state leaks."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test.

    Creates all tables before the test, then rolls back anything
    uncommitted and drops every table afterwards.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def account_store(db_session) -> AccountStore:
    """A standalone account store bound to the test session."""
    return AccountStore(db_session.session, password_min_length=6)


@pytest.fixture
def task_store(db_session) -> TaskStore:
    """A standalone task store bound to the test session."""
    return TaskStore(db_session.session)


@pytest.fixture
def app_stores(app):
    """The ``(AccountStore, TaskStore)`` pair the routes use."""
    return app.extensions[STORES_EXTENSION]


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def user_factory(db_session):
    """
    Factory that inserts ``User`` rows.

    Names and emails come from Faker unless given; the password defaults
    to ``DEFAULT_PASSWORD``.
    """

    def _create_user(
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        preferred_language: str = "en",
    ) -> User:
        user = User(
            first_name=first_name or fake.first_name(),
            last_name=last_name or fake.last_name(),
            email=email or fake.unique.email(),
            preferred_language=preferred_language,
        )
        user.set_password(password)
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def task_factory(db_session):
    """Factory that inserts ``Task`` rows for an existing user."""

    def _create_task(
        *,
        user_id: int,
        text: str | None = None,
        completed: bool = False,
        priority: str = "medium",
        due_date: datetime | None = None,
    ) -> Task:
        task = Task(
            user_id=user_id,
            text=text or fake.sentence(nb_words=4),
            completed=completed,
            priority=priority,
            due_date=due_date,
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def current_user(user_factory) -> User:
    """The user the default ``api_headers`` authenticate as."""
    return user_factory(first_name="John", last_name="Doe", email="john@example.com")


@pytest.fixture
def other_user(user_factory) -> User:
    """A second account, used for ownership checks."""
    return user_factory(first_name="Jane", last_name="Roe", email="jane@example.com")


@pytest.fixture
def api_headers(current_user) -> dict[str, str]:
    """Bearer headers for ``current_user``."""
    return auth_headers(create_test_token(user_id=current_user.id, email=current_user.email))


@pytest.fixture
def other_user_headers(other_user) -> dict[str, str]:
    """Bearer headers for ``other_user``."""
    return auth_headers(create_test_token(user_id=other_user.id, email=other_user.email))
