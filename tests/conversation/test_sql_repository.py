"""Tests for the SQL conversation repository.

Runs SQLConversationRepository against SQLite, focusing on ownership
isolation, atomic replace-on-save and error handling.
"""

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from threadstore.conversation.errors import (
    ConversationInternalError,
    ConversationNotFoundError,
    ConversationValidationError,
    StorageError,
)
from threadstore.conversation.models import Conversation, Exchange
from threadstore.conversation.orm import ConversationModel
from threadstore.conversation.sql_repository import SQLConversationRepository
from threadstore.projects.repository import SQLProjectRepository


def _conversation(project_id: int, *queries: str) -> Conversation:
    conversation = Conversation.new(project_id)
    conversation.exchanges.extend(Exchange(query=q, answer=f"answer to {q}") for q in queries)
    return conversation


async def _row_count(repository: SQLConversationRepository) -> int:
    async with repository.db.session() as session:
        result = await session.execute(select(func.count()).select_from(ConversationModel))
        return result.scalar_one()


class TestStore:
    """Tests for store (create and replace)."""

    async def test_store_then_load_round_trips(self, repository, u1_project):
        conversation = _conversation(u1_project.id, "fix bug\ndetails", "and the tests?")
        conversation.exchanges[0].paths.append("src/main.py")

        row_id = await repository.store(conversation, "u1")
        loaded = await repository.load("u1", u1_project.id, row_id)

        assert loaded.exchanges == conversation.exchanges
        assert loaded.thread_id == conversation.thread_id
        assert loaded.project_id == u1_project.id

    async def test_store_sets_title_and_timestamp(self, repository, u1_project):
        row_id = await repository.store(_conversation(u1_project.id, "fix bug\ndetails"), "u1")

        async with repository.db.session() as session:
            row = await session.get(ConversationModel, row_id)

        assert row.title == "fix bug"
        assert row.created_at > 0

    async def test_replace_keeps_thread_id_and_single_row(self, repository, u1_project):
        conversation = _conversation(u1_project.id, "first question")
        first_id = await repository.store(conversation, "u1")

        conversation.exchanges.append(Exchange(query="follow up"))
        second_id = await repository.store(conversation, "u1")

        assert second_id != first_id
        assert await _row_count(repository) == 1

        loaded = await repository.load("u1", u1_project.id, second_id)
        assert loaded.thread_id == conversation.thread_id
        assert [e.query for e in loaded.exchanges] == ["first question", "follow up"]

        with pytest.raises(ConversationNotFoundError):
            await repository.load("u1", u1_project.id, first_id)

    async def test_store_without_exchanges_raises(self, repository, u1_project):
        with pytest.raises(ConversationValidationError):
            await repository.store(Conversation.new(u1_project.id), "u1")

        assert await _row_count(repository) == 0

    async def test_failed_validation_keeps_previous_save(self, repository, u1_project):
        conversation = _conversation(u1_project.id, "keep me\nplease")
        row_id = await repository.store(conversation, "u1")
        original = list(conversation.exchanges)

        conversation.exchanges.clear()
        with pytest.raises(ConversationValidationError):
            await repository.store(conversation, "u1")

        conversation.exchanges.append(Exchange(query=""))
        with pytest.raises(ConversationValidationError):
            await repository.store(conversation, "u1")

        loaded = await repository.load("u1", u1_project.id, row_id)
        assert loaded.exchanges == original
        previews = await repository.list_previews("u1", u1_project.id)
        assert [p.title for p in previews] == ["keep me"]

    async def test_store_into_foreign_project_raises_not_found(
        self, repository, u1_project, u2_project
    ):
        with pytest.raises(ConversationNotFoundError):
            await repository.store(_conversation(u2_project.id, "sneaky"), "u1")

        assert await _row_count(repository) == 0

    async def test_store_into_missing_project_raises_not_found(self, repository):
        with pytest.raises(ConversationNotFoundError):
            await repository.store(_conversation(9999, "nowhere"), "u1")

    async def test_foreign_store_does_not_touch_owner_thread(
        self, repository, u1_project, u2_project
    ):
        """Another user reusing a thread id can neither delete nor replace it."""
        conversation = _conversation(u1_project.id, "mine")
        row_id = await repository.store(conversation, "u1")

        intruder = Conversation(
            thread_id=conversation.thread_id,
            project_id=u2_project.id,
            exchanges=[Exchange(query="theirs")],
        )
        await repository.store(intruder, "u2")

        loaded = await repository.load("u1", u1_project.id, row_id)
        assert loaded.exchanges[0].query == "mine"

    async def test_insert_failure_rolls_back_delete(self, repository, u1_project):
        """If the insert fails the previous row must still be there."""
        conversation = _conversation(u1_project.id, "survivor")
        row_id = await repository.store(conversation, "u1")

        with patch(
            "threadstore.conversation.sql_repository.insert",
            side_effect=RuntimeError("disk full"),
        ):
            with pytest.raises(RuntimeError, match="disk full"):
                await repository.store(conversation, "u1")

        loaded = await repository.load("u1", u1_project.id, row_id)
        assert loaded.exchanges[0].query == "survivor"

    async def test_empty_user_id_raises(self, repository, u1_project):
        with pytest.raises(ValueError, match="user_id cannot be empty"):
            await repository.store(_conversation(u1_project.id, "q"), "")


class TestLoad:
    """Tests for load."""

    async def test_load_missing_raises_not_found(self, repository, u1_project):
        with pytest.raises(ConversationNotFoundError):
            await repository.load("u1", u1_project.id, 12345)

    async def test_load_foreign_is_indistinguishable_from_missing(
        self, repository, u1_project
    ):
        row_id = await repository.store(_conversation(u1_project.id, "private"), "u1")

        with pytest.raises(ConversationNotFoundError) as foreign:
            await repository.load("u2", u1_project.id, row_id)
        with pytest.raises(ConversationNotFoundError) as missing:
            await repository.load("u1", u1_project.id, row_id + 100)

        assert foreign.value.message == missing.value.message
        assert foreign.value.status_code == missing.value.status_code == 404

    async def test_load_wrong_project_raises_not_found(self, repository, projects, u1_project):
        other = await projects.create_project("u1")
        row_id = await repository.store(_conversation(u1_project.id, "q"), "u1")

        with pytest.raises(ConversationNotFoundError):
            await repository.load("u1", other.id, row_id)

    async def test_malformed_exchanges_raise_internal_error(self, repository, u1_project):
        async with repository.db.session() as session:
            row = ConversationModel(
                thread_id="0b4f3f0e-2d1b-4a43-9a8e-8f1e3d1c2b7a",
                title="broken",
                exchanges="[{not json",
                project_id=u1_project.id,
                created_at=1,
            )
            session.add(row)
            await session.flush()
            row_id = row.id

        with pytest.raises(ConversationInternalError):
            await repository.load("u1", u1_project.id, row_id)

    async def test_malformed_thread_id_raises_internal_error(self, repository, u1_project):
        async with repository.db.session() as session:
            row = ConversationModel(
                thread_id="not-a-uuid",
                title="broken",
                exchanges="[]",
                project_id=u1_project.id,
                created_at=1,
            )
            session.add(row)
            await session.flush()
            row_id = row.id

        with pytest.raises(ConversationInternalError):
            await repository.load("u1", u1_project.id, row_id)


class TestListPreviews:
    """Tests for list_previews."""

    async def test_list_orders_most_recent_first(self, repository, u1_project):
        for query in ("A", "B", "C"):
            await repository.store(_conversation(u1_project.id, query), "u1")

        previews = await repository.list_previews("u1", u1_project.id)

        assert [p.title for p in previews] == ["C", "B", "A"]

    async def test_list_orders_by_created_at(self, repository, u1_project):
        old_id = await repository.store(_conversation(u1_project.id, "old"), "u1")
        new_id = await repository.store(_conversation(u1_project.id, "new"), "u1")

        # Make the row with the higher id the older one
        async with repository.db.session() as session:
            (await session.get(ConversationModel, old_id)).created_at = 2_000_000_000
            (await session.get(ConversationModel, new_id)).created_at = 1_000_000_000

        previews = await repository.list_previews("u1", u1_project.id)

        assert [p.title for p in previews] == ["old", "new"]
        assert previews[0].created_at == 2_000_000_000

    async def test_list_empty_project(self, repository, u1_project):
        assert await repository.list_previews("u1", u1_project.id) == []

    async def test_list_hides_foreign_conversations(self, repository, u1_project, u2_project):
        await repository.store(_conversation(u1_project.id, "mine"), "u1")
        await repository.store(_conversation(u2_project.id, "theirs"), "u2")

        assert await repository.list_previews("u2", u1_project.id) == []
        assert [p.title for p in await repository.list_previews("u2", u2_project.id)] == [
            "theirs"
        ]

    async def test_list_scoped_to_project(self, repository, projects, u1_project):
        other = await projects.create_project("u1")
        await repository.store(_conversation(u1_project.id, "here"), "u1")
        await repository.store(_conversation(other.id, "there"), "u1")

        previews = await repository.list_previews("u1", u1_project.id)

        assert [p.title for p in previews] == ["here"]


class TestDelete:
    """Tests for delete."""

    async def test_delete_removes_conversation(self, repository, u1_project):
        row_id = await repository.store(_conversation(u1_project.id, "bye"), "u1")

        await repository.delete("u1", u1_project.id, row_id)

        with pytest.raises(ConversationNotFoundError):
            await repository.load("u1", u1_project.id, row_id)
        assert await _row_count(repository) == 0

    async def test_delete_missing_raises_not_found(self, repository, u1_project):
        with pytest.raises(ConversationNotFoundError):
            await repository.delete("u1", u1_project.id, 777)

    async def test_delete_foreign_raises_not_found_and_keeps_row(
        self, repository, u1_project
    ):
        row_id = await repository.store(_conversation(u1_project.id, "keep"), "u1")

        with pytest.raises(ConversationNotFoundError):
            await repository.delete("u2", u1_project.id, row_id)

        assert await _row_count(repository) == 1

    async def test_delete_wrong_project_raises_not_found(
        self, repository, projects, u1_project
    ):
        other = await projects.create_project("u1")
        row_id = await repository.store(_conversation(u1_project.id, "keep"), "u1")

        with pytest.raises(ConversationNotFoundError):
            await repository.delete("u1", other.id, row_id)

        assert await _row_count(repository) == 1

    async def test_delete_twice_raises_not_found(self, repository, u1_project):
        row_id = await repository.store(_conversation(u1_project.id, "once"), "u1")
        await repository.delete("u1", u1_project.id, row_id)

        with pytest.raises(ConversationNotFoundError):
            await repository.delete("u1", u1_project.id, row_id)

    async def test_stale_id_never_addresses_a_later_conversation(self, repository, u1_project):
        stale_id = await repository.store(_conversation(u1_project.id, "first thread"), "u1")
        await repository.delete("u1", u1_project.id, stale_id)

        new_id = await repository.store(_conversation(u1_project.id, "second thread"), "u1")

        assert new_id != stale_id
        with pytest.raises(ConversationNotFoundError):
            await repository.delete("u1", u1_project.id, stale_id)
        loaded = await repository.load("u1", u1_project.id, new_id)
        assert loaded.exchanges[0].query == "second thread"


class TestStorageErrors:
    """Tests for database failures surfacing as StorageError."""

    async def test_missing_tables_raise_storage_error(self, test_db, repository, u1_project):
        await test_db.drop_tables()

        with pytest.raises(StorageError) as exc_info:
            await repository.list_previews("u1", u1_project.id)

        assert exc_info.value.status_code == 503
        assert exc_info.value.__cause__ is not None


async def test_fix_bug_scenario(test_db):
    """u1 owns project 42: store, list, load, delete, then load again."""
    from threadstore.projects.orm import ProjectModel

    async with test_db.session() as session:
        session.add(ProjectModel(id=42, user_id="u1"))

    repository = SQLConversationRepository(test_db)
    conversation = Conversation.new(42)
    conversation.exchanges.append(Exchange(query="fix bug\ndetails"))

    await repository.store(conversation, "u1")

    previews = await repository.list_previews("u1", 42)
    assert len(previews) == 1
    assert previews[0].title == "fix bug"

    loaded = await repository.load("u1", 42, previews[0].id)
    assert [e.query for e in loaded.exchanges] == ["fix bug\ndetails"]

    await repository.delete("u1", 42, previews[0].id)

    with pytest.raises(ConversationNotFoundError):
        await repository.load("u1", 42, previews[0].id)


async def _race_two_saves(db):
    project = await SQLProjectRepository(db).create_project("u1")
    repository = SQLConversationRepository(db)

    base = Conversation.new(project.id)
    p1 = base.model_copy(
        update={"exchanges": [Exchange(query="payload one"), Exchange(query="one more")]}
    )
    p2 = base.model_copy(update={"exchanges": [Exchange(query="payload two")]})

    await asyncio.gather(repository.store(p1, "u1"), repository.store(p2, "u1"))

    previews = await repository.list_previews("u1", project.id)
    assert len(previews) == 1

    loaded = await repository.load("u1", project.id, previews[0].id)
    assert loaded.thread_id == base.thread_id
    assert loaded.exchanges in (p1.exchanges, p2.exchanges)
    assert previews[0].title == loaded.exchanges[0].query


async def test_concurrent_replace_is_last_commit_wins(test_db_file):
    """Two concurrent saves of one thread leave exactly one complete payload."""
    await _race_two_saves(test_db_file)


async def test_concurrent_replace_in_memory_is_last_commit_wins(test_db):
    """The shared in-memory connection still gives each save its own transaction."""
    await _race_two_saves(test_db)


async def test_store_runs_serializable(test_db, u1_project, monkeypatch):
    """The replace transaction asks for SERIALIZABLE isolation."""
    requested = []
    open_session = test_db.session

    def recording_session(isolation_level=None):
        requested.append(isolation_level)
        return open_session(isolation_level=isolation_level)

    monkeypatch.setattr(test_db, "session", recording_session)

    await SQLConversationRepository(test_db).store(_conversation(u1_project.id, "q"), "u1")

    assert requested == ["SERIALIZABLE"]
