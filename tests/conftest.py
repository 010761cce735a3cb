"""
Shared fixtures.

Tests run against an in-memory SQLite database; the environment must be
set before any application module builds its engine.
"""

import os
from datetime import date

import pytest

os.environ.setdefault('POSTGRES_USER', 'test_user')
os.environ.setdefault('POSTGRES_PASSWORD', 'test_password')
os.environ.setdefault('POSTGRES_DB', 'test_db')
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['RATE_LIMIT_ENABLED'] = 'false'

import models  # noqa: E402,F401
from app.middleware.auth import generate_api_key, hash_api_key  # noqa: E402
from core.config import get_settings  # noqa: E402
from core.database import Base, SessionLocal, engine  # noqa: E402
from models.enums import RSVPStatus  # noqa: E402
from models.guest import Guest  # noqa: E402
from models.user import User  # noqa: E402
from models.wedding import Wedding  # noqa: E402
from services.guest_service import generate_rsvp_token  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_planner(db_session):
    """Factory creating a planner; returns (user, plaintext API key)."""

    def _make(email="planner@example.com", plan="free", **kwargs):
        api_key = generate_api_key()
        user = User(email=email, plan=plan, api_key_hash=hash_api_key(api_key), **kwargs)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user, api_key

    return _make


@pytest.fixture
def planner(make_planner):
    user, _ = make_planner()
    return user


@pytest.fixture
def make_wedding(db_session):
    def _make(user, name="Alex & Sam", **kwargs):
        kwargs.setdefault("date", date(2030, 6, 14))
        wedding = Wedding(user_id=user.id, name=name, **kwargs)
        db_session.add(wedding)
        db_session.commit()
        db_session.refresh(wedding)
        return wedding

    return _make


@pytest.fixture
def wedding(make_wedding, planner):
    return make_wedding(planner)


@pytest.fixture
def make_guest(db_session):
    def _make(wedding, name="Jordan Lee", email=None, rsvp_status=RSVPStatus.PENDING, token=None, **kwargs):
        guest = Guest(
            wedding_id=wedding.id,
            name=name,
            email=email,
            rsvp_status=rsvp_status,
            rsvp_token=token or generate_rsvp_token(),
            **kwargs,
        )
        db_session.add(guest)
        db_session.commit()
        db_session.refresh(guest)
        return guest

    return _make


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
