"""
Shared pytest fixtures.

Uses a throwaway SQLite file so no Postgres is required for tests. Every
test gets its own user id, so rows left behind by one test never leak into
another's snapshot.
"""
import uuid
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from moodlog.db.base import Base, get_db
from moodlog.main import app
from moodlog.routers.deps import get_notifier
from moodlog.services import weekly_review
from moodlog.services.notifications import RecordingNotifier
from moodlog.services.records import Impact, MoodRecord
from moodlog.services.stores import local_unlock_cache

SQLITE_URL = "sqlite:///./test_moodlog.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def record(day: datetime, mood: float, note: str = "", photo=None, **factors) -> MoodRecord:
    """Build a snapshot record; factor kwargs map name → "positive" | "negative"."""
    return MoodRecord(
        date=day,
        mood_level=mood,
        factors={name: Impact(value) for name, value in factors.items()},
        note=note,
        photo_asset_ref=photo,
    )


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_process_state():
    local_unlock_cache.clear()
    weekly_review._current_review_ids.clear()
    yield
    local_unlock_cache.clear()
    weekly_review._current_review_ids.clear()


@pytest.fixture()
def user_id():
    return f"user-{uuid.uuid4().hex[:12]}"


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def recording_client(notifier):
    """Client whose notifications are captured in `notifier` instead of stored."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
