"""Service test fixtures — in-memory SQLite stores.

Invariants:
    - Every store gets its own private in-memory database
    - Every store created through make_store is closed after the test
    - The users table schema is the one most tests write against

Design Decisions:
    - SQLite :memory: with StaticPool: fast, no files, one connection per store
    - Storage engine created explicitly so tests can reach under the store
"""

import pytest

from squirreldb.config import Settings
from squirreldb.core.domain_types import MirrorPolicy
from squirreldb.infrastructure.database import StorageEngine
from squirreldb.services.record_store import SquirrelDB

USERS_SCHEMA = {
    "columns": [
        ["name", "string"],
        ["age", "number"],
        ["active", "boolean"],
        ["profile", "json"],
        ["score", "number"],
    ],
}


@pytest.fixture
async def make_store():
    """Factory for in-memory stores: make_store(policy=MirrorPolicy.SEQUENTIAL)."""
    created = []

    def _make(policy: MirrorPolicy = MirrorPolicy.SEQUENTIAL, cls=SquirrelDB, **kwargs):
        settings = Settings(file_path=":memory:", mirror_policy=policy)
        engine = StorageEngine("sqlite+aiosqlite:///:memory:")
        store = cls(settings=settings, engine=engine, **kwargs)
        created.append(store)
        return store

    yield _make
    for store in created:
        await store.close()


@pytest.fixture
async def store(make_store):
    return make_store()


@pytest.fixture
async def users(store):
    """Store with the users table initialized."""
    await store.init_table("users", USERS_SCHEMA)
    return store


@pytest.fixture
def users_schema():
    return {"columns": [list(col) for col in USERS_SCHEMA["columns"]]}
