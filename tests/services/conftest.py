"""Service test fixtures — in-memory SQLite database, pinned clock, recording observer.

Invariants:
    - Every test gets a fresh in-memory SQLite database with foreign keys enforced
    - The clock is pinned at NOW; tests advance it explicitly
    - The observer records (event, entity, record_id, payload) tuples in order
"""

from datetime import datetime, timedelta, timezone

import pytest

from taskboard.db.session import create_schema
from taskboard.infrastructure.clock import FixedClock
from taskboard.infrastructure.database import DatabaseSessionManager
from taskboard.schemas.records import ProjectCreate, TaskCreate, UserCreate
from taskboard.services.records import RecordService
from taskboard.services.stats import StatsService

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
TOMORROW = NOW + timedelta(days=1)

VALID_USER = {
    "username": "testuser",
    "email": "test@example.com",
    "password": "pAssword123!",
    "first_name": "Test",
    "last_name": "User",
}


class RecordingObserver:
    def __init__(self):
        self.events: list[tuple] = []

    def record_created(self, entity, record_id, data):
        self.events.append(("created", entity, record_id, dict(data)))

    def record_updated(self, entity, record_id, changes):
        self.events.append(("updated", entity, record_id, dict(changes)))

    def record_deleted(self, entity, record_id):
        self.events.append(("deleted", entity, record_id, None))


@pytest.fixture
async def db_manager():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await create_schema(manager.engine)
    yield manager
    await manager.dispose()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def records(db_manager, clock, observer):
    return RecordService(db_manager, clock=clock, observer=observer)


@pytest.fixture
def stats(db_manager, clock):
    return StatsService(db_manager, clock=clock)


@pytest.fixture
async def user(records):
    return await records.create_user(UserCreate(**VALID_USER))


@pytest.fixture
async def project(records, user):
    return await records.create_project(ProjectCreate(
        name="Project", end_date=TOMORROW, user_id=user.id,
    ))


@pytest.fixture
def make_task(records, user, project):
    """Factory: create a task for the seeded user/project with overrides."""
    async def _make(**overrides):
        fields = {
            "title": "A task",
            "due_date": TOMORROW,
            "user_id": user.id,
            "project_id": project.id,
            **overrides,
        }
        return await records.create_task(TaskCreate(**fields))
    return _make
