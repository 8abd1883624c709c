"""
Pytest configuration and fixtures

Tests run against an in-memory SQLite database. The schema is created fresh
for every test and dropped afterwards, so nothing leaks between tests.
"""
import os
import sys

# Must be set before core.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_FORMAT", "text")

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from datetime import date

from core.database import Base, SessionLocal, engine
from models import Athlete


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_athlete(db_session):
    athlete = Athlete(
        email="athlete@example.com",
        display_name="Test Athlete",
        birthdate=date(2004, 5, 1),
        sport="baseball",
        league_tier="college_d1",
        primary_position="SS",
    )
    db_session.add(athlete)
    db_session.commit()
    return athlete
