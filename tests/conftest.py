"""
Pytest fixtures for Explore Service tests.

Uses an in-memory SQLite database through the same ORM models as production,
plus in-memory fakes for the cache and the decision store.
"""

import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.db import Base
from core.exceptions import CacheError, StorageUnavailableError
from core.models import Decision  # noqa: F401  registers the table
from core.services import BackgroundWriter


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    db_url = "sqlite://"
    engine = create_engine(
        db_url,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    yield db_url, TestingSessionLocal, engine

    engine.dispose()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    _, TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


class FakeCache:
    """In-memory CacheProvider with call counters and injectable faults."""

    def __init__(self):
        self.data: dict[str, dict] = {}
        self.ttls: dict[str, int] = {}
        self.calls = Counter()
        self.fail_reads = False
        self.fail_writes = False
        self._lock = threading.Lock()

    def get(self, key):
        raise NotImplementedError

    def set(self, key, value, ttl):
        raise NotImplementedError

    def delete(self, *keys):
        with self._lock:
            return sum(1 for key in keys if self.data.pop(key, None) is not None)

    def get_json(self, key):
        with self._lock:
            self.calls["get_json"] += 1
            if self.fail_reads:
                raise CacheError("connection reset")
            return self.data.get(key)

    def set_json(self, key, value, ttl):
        with self._lock:
            self.calls["set_json"] += 1
            if self.fail_writes:
                raise CacheError("connection reset")
            self.data[key] = value
            self.ttls[key] = ttl
            return True


class FakeStore:
    """In-memory DecisionStore double that records every call."""

    def __init__(self):
        self.calls = Counter()
        self.likers = ([], None)
        self.new_likers = ([], None)
        self.count = 0
        self.mutual = False
        self.failures: dict[str, Exception] = {}
        self.cursors = []

    def _call(self, name):
        self.calls[name] += 1
        if name in self.failures:
            raise self.failures[name]

    def get_likers(self, recipient_user_id, cursor):
        self._call("get_likers")
        self.cursors.append(cursor)
        return self.likers

    def get_new_likers(self, recipient_user_id, cursor):
        self._call("get_new_likers")
        self.cursors.append(cursor)
        return self.new_likers

    def count_likes(self, recipient_user_id):
        self._call("count_likes")
        return self.count

    def upsert_decision(self, actor_user_id, recipient_user_id, liked):
        self._call("upsert_decision")

    def has_mutual_like(self, actor_user_id, recipient_user_id):
        self._call("has_mutual_like")
        return self.mutual

    def fail(self, name, error=None):
        self.failures[name] = error or StorageUnavailableError(f"{name} failed")


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def writer():
    """Background writer; call ``writer.shutdown()`` to drain before asserting."""
    writer = BackgroundWriter(executor=ThreadPoolExecutor(max_workers=2))
    yield writer
    writer.shutdown(wait=True)
