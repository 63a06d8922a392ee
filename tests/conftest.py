"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from tests.test_constants import TEST_INTERNAL_JOB_TOKEN, TEST_PARTICIPANT_API_TOKEN

# Tests never touch a real database or participant API; don't inherit from .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INTERNAL_JOB_TOKEN"] = TEST_INTERNAL_JOB_TOKEN
os.environ["PARTICIPANT_API_URL"] = "https://participants.test"
os.environ["PARTICIPANT_API_TOKEN"] = TEST_PARTICIPANT_API_TOKEN


@pytest.fixture
def db() -> Session:
    """In-memory SQLite session with all tables created. Discarded after each test."""
    from burst_notifier.db.session import Base
    import burst_notifier.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = Session(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client():
    """FastAPI test client."""
    from fastapi.testclient import TestClient

    from burst_notifier.main import app

    return TestClient(app)
