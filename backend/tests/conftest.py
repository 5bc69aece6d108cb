"""Shared test fixtures and configuration.

Sets environment variables before any orchestrate imports and provides an
isolated SQLite database per test, a seeding helper and an API client.
"""

import os

# Patch env vars BEFORE any orchestrate imports
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from orchestrate.config import Settings
from orchestrate.database import Database
from orchestrate.models import (
    Booking, Project, Room, Task, TaskPriority, TaskStatus, User, UserRole, UserStatus,
)
from orchestrate.permissions import Principal
from orchestrate.utils.security import create_access_token

# Anchor for booking times in tests
DAY = datetime(2026, 3, 2)


def at(hour: int, minute: int = 0, day: datetime = DAY) -> datetime:
    return day + timedelta(hours=hour, minutes=minute)


class Seeder:
    """Creates committed rows through one session.

    The session does not expire objects on commit, so reading ``.id`` after
    seeding never opens a new transaction.
    """

    def __init__(self, session):
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def user(self, role=UserRole.DEVELOPER, name=None, email=None, status=UserStatus.ACTIVE,
             hashed_password="not-a-real-hash"):
        n = self._next()
        return self._save(User(
            name=name or f"{role.value.title()} {n}",
            email=email or f"user{n}@orchestrate.test",
            hashed_password=hashed_password,
            role=role,
            status=status,
        ))

    def room(self, name=None, capacity=8):
        return self._save(Room(name=name or f"Boardroom {self._next()}", capacity=capacity))

    def project(self, pm=None, name=None):
        return self._save(Project(name=name or f"Project {self._next()}", pm_id=pm.id if pm else None))

    def task(self, project, assignee=None, status=TaskStatus.TODO, title=None, description=None,
             estimated_hours=None, actual_hours=None, priority=TaskPriority.MEDIUM, created_by=None):
        return self._save(Task(
            title=title or f"Task {self._next()}",
            description=description,
            status=status,
            priority=priority,
            estimated_hours=estimated_hours,
            actual_hours=actual_hours,
            project_id=project.id,
            assigned_to_id=assignee.id if assignee else None,
            created_by_id=created_by.id if created_by else None,
        ))

    def booking(self, room, start, end, user=None, title="Standup", guest_name=None, description=None,
                attendees=None):
        return self._save(Booking(
            room_id=room.id,
            start_time=start,
            end_time=end,
            title=title,
            description=description,
            attendees=attendees,
            user_id=user.id if user else None,
            is_external=user is None,
            guest_name=guest_name if user is None else None,
        ))


def principal(user) -> Principal:
    return Principal(id=user.id, role=user.role)


@pytest.fixture
def database(tmp_path):
    """A fresh SQLite database file for each test."""
    db = Database(f"sqlite:///{tmp_path / 'orchestrate_test.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db(database):
    session = database.SessionLocal(expire_on_commit=False)
    yield session
    session.close()


@pytest.fixture
def seed(db):
    return Seeder(db)


@pytest.fixture
def settings(database):
    return Settings(SECRET_KEY="test-secret-key", DATABASE_URL=database.url, LOG_LEVEL="WARNING")


@pytest.fixture
def client(settings, database):
    from orchestrate.main import create_app

    app = create_app(settings=settings, database=database)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(settings):
    """Return a function building bearer headers for a seeded user."""

    def _headers(user) -> dict:
        token = create_access_token(
            data={"sub": str(user.id), "role": user.role.value},
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
