"""Pytest configuration and shared fixtures for the test suite."""

import os
import tempfile
from typing import AsyncGenerator

import pytest

from threadstore.conversation.sql_repository import SQLConversationRepository
from threadstore.projects.models import Project
from threadstore.projects.repository import SQLProjectRepository
from threadstore.storage.database import Database, DatabaseConfig

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
async def test_db() -> AsyncGenerator[Database, None]:
    """Create an in-memory SQLite database with all tables.

    Yields:
        Database instance with in-memory SQLite connection
    """
    db = Database(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await db.create_tables()

    yield db

    await db.close()


@pytest.fixture
async def test_db_file() -> AsyncGenerator[Database, None]:
    """Create a file-based SQLite database for tests that need several connections.

    Yields:
        Database instance with file-based SQLite connection
    """
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    try:
        db = Database(DatabaseConfig(url=f"sqlite+aiosqlite:///{db_path}"))
        await db.create_tables()

        yield db

        await db.close()
    finally:
        if os.path.exists(db_path):
            os.remove(db_path)


@pytest.fixture
def projects(test_db: Database) -> SQLProjectRepository:
    """Project repository on the in-memory database."""
    return SQLProjectRepository(test_db)


@pytest.fixture
def repository(test_db: Database) -> SQLConversationRepository:
    """Conversation repository on the in-memory database."""
    return SQLConversationRepository(test_db)


@pytest.fixture
async def u1_project(projects: SQLProjectRepository) -> Project:
    """A project owned by user u1."""
    return await projects.create_project("u1")


@pytest.fixture
async def u2_project(projects: SQLProjectRepository) -> Project:
    """A project owned by user u2."""
    return await projects.create_project("u2")
