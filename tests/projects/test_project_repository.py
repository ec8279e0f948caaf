"""Tests for the project registry and project deletion cascade."""

import pytest
from sqlalchemy import delete, func, select

from threadstore.conversation.models import Conversation, Exchange
from threadstore.conversation.orm import ConversationModel
from threadstore.projects.orm import ProjectModel


class TestSQLProjectRepository:
    """Tests for SQLProjectRepository."""

    async def test_create_project(self, projects) -> None:
        project = await projects.create_project("u1")

        assert project.id is not None
        assert project.user_id == "u1"

    async def test_create_project_empty_user_id(self, projects) -> None:
        with pytest.raises(ValueError, match="user_id cannot be empty"):
            await projects.create_project("  ")

    async def test_get_project_owned(self, projects) -> None:
        created = await projects.create_project("u1")

        assert await projects.get_project(created.id, "u1") == created

    async def test_get_project_foreign_returns_none(self, projects) -> None:
        created = await projects.create_project("u1")

        assert await projects.get_project(created.id, "u2") is None

    async def test_get_project_missing_returns_none(self, projects) -> None:
        assert await projects.get_project(404, "u1") is None


async def test_deleting_project_cascades_to_conversations(test_db, repository, u1_project):
    conversation = Conversation.new(u1_project.id)
    conversation.exchanges.append(Exchange(query="orphan?"))
    await repository.store(conversation, "u1")

    async with test_db.session() as session:
        await session.execute(delete(ProjectModel).where(ProjectModel.id == u1_project.id))

    async with test_db.session() as session:
        count = await session.execute(select(func.count()).select_from(ConversationModel))
        assert count.scalar_one() == 0
