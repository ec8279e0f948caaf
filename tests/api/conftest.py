"""Shared fixtures for API tests.

The application runs its real lifespan against a temporary SQLite file.
Projects are seeded straight into that file, since the API has no project
routes.
"""

import sqlite3
from pathlib import Path
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from threadstore.api.app import create_app
from threadstore.config import Settings


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path of the SQLite file backing the test application."""
    return tmp_path / "api.db"


@pytest.fixture
def client(db_path: Path) -> Iterator[TestClient]:
    """Test client with the application lifespan running."""
    settings = Settings(database_url=f"sqlite+aiosqlite:///{db_path}", json_logs=False)
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def seed_project(client: TestClient, db_path: Path) -> Callable[[int, str], None]:
    """Insert a project row owned by a user."""

    def _seed(project_id: int, user_id: str) -> None:
        with sqlite3.connect(db_path) as conn:
            conn.execute(
                "INSERT INTO projects (id, user_id) VALUES (?, ?)",
                (project_id, user_id),
            )

    return _seed
