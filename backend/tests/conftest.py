"""
Pytest fixtures for Kontainar backend tests.

Provides an app on in-memory SQLite, a test client, and memory-backed
service fixtures with a deterministic clock.
"""

import time
from datetime import datetime, timedelta

import pytest

from kontainar import create_app
from kontainar.config import TestingConfig
from kontainar.extensions import db
from kontainar.models import StorageEntry
from kontainar.services.registry import build_services
from kontainar.storage import MemoryStorage
from kontainar.time_utils import to_utc_z


class TickingClock:
    """Returns a strictly increasing ISO timestamp on every call (one second apart)."""

    def __init__(self, start=datetime(2024, 1, 15, 10, 0, 0)):
        self.current = start

    def __call__(self) -> str:
        self.current += timedelta(seconds=1)
        return to_utc_z(self.current)


class SlowStorage(MemoryStorage):
    """MemoryStorage that pauses after every read, widening the load-to-save window."""

    def get_item(self, key):
        value = super().get_item(key)
        time.sleep(0.01)
        return value


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(config_object=TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client on an empty storage table."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty the storage table for each test."""
    with app.app_context():
        db.session.query(StorageEntry).delete()
        db.session.commit()

        yield db.session

        db.session.rollback()


@pytest.fixture(scope='function')
def clock():
    return TickingClock()


@pytest.fixture(scope='function')
def storage():
    return MemoryStorage()


@pytest.fixture(scope='function')
def services(storage, clock):
    """All domain services on a fresh MemoryStorage."""
    return build_services(storage, clock=clock)


@pytest.fixture(scope='function')
def seeded(services):
    """Services with every collection seeded."""
    services.initialize_all()
    return services


@pytest.fixture(scope='function')
def slow_storage():
    return SlowStorage()
