"""Shared fixtures: an in-memory database injected into the app, and factories bound to it."""
import os

# Settings are read at import time
os.environ["SECRET_KEY"] = "test-secret-key-0123456789-abcdefghijklmnop"
os.environ["CLIENT_URL"] = "https://gartanggali.com"
os.environ["DB_CREATE_TABLES"] = "true"
os.environ["SMTP_HOST"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from resort.auth.utils import create_access_token
from resort.bookings.token_codec import BookingTokenCodec
from resort.database import Database
from resort.main import create_app
from tests.factories import ALL_FACTORIES


@pytest.fixture
def database():
    database = Database("sqlite://", poolclass=StaticPool)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    for factory_class in ALL_FACTORIES:
        factory_class._meta.sqlalchemy_session = session
    yield session
    session.close()


@pytest.fixture
def client(database):
    app = create_app(database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def codec():
    return BookingTokenCodec.from_settings()


def auth_headers(user):
    """Bearer header for ``user``"""
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}
