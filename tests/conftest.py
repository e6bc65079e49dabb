"""
Pytest configuration and shared fixtures for testing.

Provides reusable test fixtures:
- test_db: In-memory SQLite database for isolated testing
- repo: ShiftRepository over the test database
- test_client: FastAPI TestClient with database and clock overrides
- reference_pattern / three_day_pattern: patterns used across test modules
"""

import datetime
import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Keep the application engine off the working directory during tests
os.environ.setdefault("SHIFTCAL_DATABASE_URL", "sqlite://")
os.environ.setdefault("SHIFTCAL_SEED_SAMPLE", "false")

# ruff: noqa: E402
from shiftcal.core.models import ShiftPattern, ShiftType
from shiftcal.core.utils import get_now, get_today
from shiftcal.database.database import Base, get_db
from shiftcal.database.repository import ShiftRepository
from shiftcal.main import app

D, N, O = ShiftType.DAY, ShiftType.NIGHT, ShiftType.OFF

#: Fast "idag" för API-testerna
FIXED_TODAY = datetime.date(2024, 1, 1)
FIXED_NOW = datetime.datetime(2024, 1, 1, 7, 0)


@pytest.fixture(scope="function")
def test_db():
    """
    Create an in-memory SQLite database for testing.

    StaticPool keeps a single connection, so the TestClient's worker
    threads see the same in-memory database as the test itself.

    Yields:
        SQLAlchemy Session: Database session for test use
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def repo(test_db):
    """Repository over the test database."""
    return ShiftRepository(test_db)


@pytest.fixture(scope="function")
def test_client(test_db):
    """
    Create FastAPI TestClient with test database and clock overrides.

    Today is fixed to 2024-01-01 and now to 07:00 that day.

    Yields:
        TestClient: FastAPI test client for API testing
    """

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: FIXED_TODAY
    app.dependency_overrides[get_now] = lambda: FIXED_NOW

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def reference_pattern():
    """Day-Day-Night-Night-Off-Off starting 2024-01-01."""
    return ShiftPattern(
        id="reference",
        name="Day-Day-Night-Night-Off-Off",
        cycle=(D, D, N, N, O, O),
        start_date=datetime.date(2024, 1, 1),
    )


@pytest.fixture
def three_day_pattern():
    """Day-Night-Off starting 2024-01-01."""
    return ShiftPattern(
        id="three-day",
        name="Day-Night-Off",
        cycle=(D, N, O),
        start_date=datetime.date(2024, 1, 1),
    )
