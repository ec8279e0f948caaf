"""SQL-backed implementation of ConversationRepository.

Each conversation is a single row whose exchanges are a JSON blob. Saving is
destroy-and-recreate: the previous row for the thread is deleted and a new one
inserted inside one transaction, so readers see either the old row or the new
one and never neither.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import Integer, Text, delete, insert, literal, select
from sqlalchemy.exc import SQLAlchemyError

from threadstore.conversation.errors import (
    ConversationInternalError,
    ConversationNotFoundError,
    ConversationValidationError,
    StorageError,
)
from threadstore.conversation.models import (
    Conversation,
    ConversationPreview,
    deserialize_exchanges,
    serialize_exchanges,
)
from threadstore.conversation.orm import ConversationModel
from threadstore.conversation.ownership import conversation_owned_by, project_owned_by
from threadstore.observability.logging import get_logger
from threadstore.observability.metrics import get_metrics_collector
from threadstore.projects.orm import ProjectModel
from threadstore.storage.database import Database

logger = get_logger(__name__)

_conversations = ConversationModel.__table__
_projects = ProjectModel.__table__


class SQLConversationRepository:
    """SQL implementation of ConversationRepository using SQLAlchemy.

    Ownership is enforced in the WHERE clause of every statement via
    ``threadstore.conversation.ownership``.

    Attributes:
        db: Database instance for session management
    """

    def __init__(self, db: Database):
        """Initialize repository with database connection.

        Args:
            db: Database instance for session management
        """
        self.db = db

    async def store(self, conversation: Conversation, user_id: str) -> int:
        """Create or atomically replace the stored conversation for a thread.

        The title is derived and the exchanges are serialized before the
        transaction opens, so an invalid conversation never deletes anything.
        The delete and insert run in one SERIALIZABLE transaction; a concurrent
        save of the same thread that cannot be serialized fails with
        StorageError instead of leaving two rows behind.

        Args:
            conversation: Conversation to persist
            user_id: Acting user; must own the conversation's project

        Returns:
            Row id of the newly written conversation

        Raises:
            ValueError: If user_id is empty
            ConversationValidationError: If no title can be derived
            ConversationNotFoundError: If the project is not owned by user_id
            StorageError: If the transaction fails
        """
        _require_user(user_id)

        async with self._tracked("store"):
            title = conversation.title()
            blob = serialize_exchanges(conversation.exchanges)
            thread_id = str(conversation.thread_id)

            async with self.db.session(isolation_level="SERIALIZABLE") as session:
                await session.execute(
                    delete(_conversations).where(
                        _conversations.c.thread_id == thread_id,
                        conversation_owned_by(user_id),
                    )
                )

                # INSERT ... SELECT from projects: inserts nothing unless the
                # project exists and is owned by user_id
                source = select(
                    literal(thread_id, Text),
                    literal(title, Text),
                    literal(blob, Text),
                    _projects.c.id,
                    literal(int(time.time()), Integer),
                ).where(project_owned_by(user_id, conversation.project_id))
                result = await session.execute(
                    insert(_conversations).from_select(
                        ["thread_id", "title", "exchanges", "project_id", "created_at"],
                        source,
                    )
                )
                if result.rowcount == 0:
                    raise ConversationNotFoundError()

                row_id = (
                    await session.execute(
                        select(ConversationModel.id)
                        .where(
                            ConversationModel.thread_id == thread_id,
                            conversation_owned_by(user_id),
                        )
                        .order_by(ConversationModel.id.desc())
                        .limit(1)
                    )
                ).scalar_one()

        logger.info(
            "conversation_stored",
            conversation_id=row_id,
            thread_id=thread_id,
            project_id=conversation.project_id,
            exchange_count=len(conversation.exchanges),
        )
        return row_id

    async def load(self, user_id: str, project_id: int, conversation_id: int) -> Conversation:
        """Load one conversation with all its exchanges.

        Args:
            user_id: Acting user
            project_id: Project the conversation must belong to
            conversation_id: Storage row id

        Returns:
            The stored conversation

        Raises:
            ValueError: If user_id is empty
            ConversationNotFoundError: If no owned conversation matches
            ConversationInternalError: If the stored data cannot be decoded
            StorageError: If the query fails
        """
        _require_user(user_id)

        async with self._tracked("load"):
            async with self.db.session() as session:
                stmt = select(ConversationModel.exchanges, ConversationModel.thread_id).where(
                    ConversationModel.id == conversation_id,
                    ConversationModel.project_id == project_id,
                    conversation_owned_by(user_id),
                )
                row = (await session.execute(stmt)).one_or_none()

            if row is None:
                raise ConversationNotFoundError()

            try:
                exchanges = deserialize_exchanges(row.exchanges)
                thread_id = UUID(row.thread_id)
            except (PydanticValidationError, ValueError) as e:
                logger.error(
                    "conversation_decode_failed",
                    conversation_id=conversation_id,
                    project_id=project_id,
                    error=str(e),
                )
                raise ConversationInternalError(
                    f"stored conversation {conversation_id} is malformed"
                ) from e

        return Conversation(thread_id=thread_id, project_id=project_id, exchanges=exchanges)

    async def list_previews(self, user_id: str, project_id: int) -> List[ConversationPreview]:
        """List previews of a project's conversations, most recent first.

        Rows written in the same second are ordered by row id, newest first.

        Args:
            user_id: Acting user
            project_id: Project to list

        Returns:
            Previews ordered by created_at descending; empty if none are visible

        Raises:
            ValueError: If user_id is empty
            StorageError: If the query fails
        """
        _require_user(user_id)

        async with self._tracked("list"):
            async with self.db.session() as session:
                stmt = (
                    select(
                        ConversationModel.id,
                        ConversationModel.created_at,
                        ConversationModel.title,
                    )
                    .where(
                        ConversationModel.project_id == project_id,
                        conversation_owned_by(user_id),
                    )
                    .order_by(ConversationModel.created_at.desc(), ConversationModel.id.desc())
                )
                rows = (await session.execute(stmt)).all()

        return [
            ConversationPreview(id=row.id, created_at=row.created_at, title=row.title)
            for row in rows
        ]

    async def delete(self, user_id: str, project_id: int, conversation_id: int) -> None:
        """Delete one conversation in a single statement.

        Args:
            user_id: Acting user
            project_id: Project the conversation must belong to
            conversation_id: Storage row id

        Raises:
            ValueError: If user_id is empty
            ConversationNotFoundError: If no owned conversation matches
            StorageError: If the statement fails
        """
        _require_user(user_id)

        async with self._tracked("delete"):
            async with self.db.session() as session:
                result = await session.execute(
                    delete(_conversations).where(
                        _conversations.c.id == conversation_id,
                        _conversations.c.project_id == project_id,
                        conversation_owned_by(user_id),
                    )
                )
                deleted = result.rowcount

            if deleted == 0:
                raise ConversationNotFoundError()

        logger.info(
            "conversation_deleted",
            conversation_id=conversation_id,
            project_id=project_id,
        )

    @asynccontextmanager
    async def _tracked(self, operation: str) -> AsyncGenerator[None, None]:
        """Record the outcome of one operation and wrap database failures.

        Any SQLAlchemyError escaping the block is re-raised as StorageError.
        """
        metrics = get_metrics_collector()
        try:
            yield
        except ConversationNotFoundError:
            metrics.record_conversation_operation(operation, "not_found")
            raise
        except ConversationValidationError as e:
            metrics.record_conversation_operation(operation, "invalid")
            logger.warning("conversation_rejected", operation=operation, reason=e.message)
            raise
        except ConversationInternalError:
            metrics.record_conversation_operation(operation, "internal_error")
            raise
        except SQLAlchemyError as e:
            metrics.record_conversation_operation(operation, "storage_error")
            logger.error("conversation_storage_failed", operation=operation, error=str(e))
            raise StorageError(f"failed to {operation} conversation") from e
        else:
            metrics.record_conversation_operation(operation, "success")


def _require_user(user_id: str) -> None:
    if not user_id or not user_id.strip():
        raise ValueError("user_id cannot be empty")
