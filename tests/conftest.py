from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from showfinder.auth.verify import admin_dependency, auth_dependency
from showfinder.db.pool import db_pool


@pytest.fixture
def auth_override():
    def _override():
        return {"sub": "admin-123"}

    return _override


@pytest.fixture
def apply_admin_override(auth_override):
    def _apply(app):
        app.dependency_overrides[auth_dependency] = auth_override
        app.dependency_overrides[admin_dependency] = auth_override

    yield _apply

    from showfinder.main import app

    app.dependency_overrides.clear()


class FakeConnection:
    """Stands in for a psycopg connection inside db_pool.transaction()."""

    def __init__(self):
        self.execute = AsyncMock()
        self.savepoints = 0
        self.committed = False

    @asynccontextmanager
    async def transaction(self):
        self.savepoints += 1
        yield self


@pytest.fixture
def fake_conn(monkeypatch):
    conn = FakeConnection()

    @asynccontextmanager
    async def _transaction():
        yield conn
        conn.committed = True

    monkeypatch.setattr(db_pool, "transaction", _transaction)
    return conn


class FakeRedis:
    def __init__(self):
        self.lists: dict[str, list] = {}

    async def push_json(self, key: str, payload: dict) -> bool:
        self.lists.setdefault(key, []).append(payload)
        return True

    async def ping(self) -> bool:
        return True

    async def queue_length(self, key: str) -> int:
        return len(self.lists.get(key, []))


@pytest.fixture
def fake_redis():
    return FakeRedis()
