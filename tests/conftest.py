"""
Shared pytest fixtures for modelspine tests.

This module provides:
- A fresh ``ModelRegistry`` per test (User, Profile, Event)
- A connected in-memory SQLite adapter
- A migrated ``Database`` and its ``Session``

Usage:
    @pytest.mark.asyncio
    async def test_create(session):
        user = (await session.create(User, name="Jane", age=28)).unwrap()
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Ensure modelspine and the tests package are importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from modelspine.core.adapters import SQLiteAdapter
from modelspine.database import Database
from tests._support.models import make_registry


@pytest.fixture
def registry():
    return make_registry()


@pytest_asyncio.fixture
async def adapter():
    """Connected in-memory SQLite adapter, closed after the test."""
    sqlite = SQLiteAdapter(":memory:")
    await sqlite.connect()
    yield sqlite
    await sqlite.disconnect()


@pytest_asyncio.fixture
async def db(adapter, registry):
    """Database over ``adapter`` with every test model migrated."""
    database = Database(adapter, registry=registry)
    (await database.migrate()).unwrap()
    return database


@pytest.fixture
def session(db):
    return db.session
