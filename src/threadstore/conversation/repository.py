"""Conversation repository interface.

Defines the Protocol for conversation persistence. Every operation takes the
acting user's id and must apply the ownership filter.
"""

from typing import List, Protocol

from threadstore.conversation.models import Conversation, ConversationPreview


class ConversationRepository(Protocol):
    """Repository interface for conversation persistence.

    Implementations must treat "does not exist", "wrong project" and "not owned
    by this user" identically, so that existence is never leaked.
    """

    async def store(self, conversation: Conversation, user_id: str) -> int:
        """Create or atomically replace the stored conversation for a thread.

        Args:
            conversation: Conversation to persist
            user_id: Acting user; must own the conversation's project

        Returns:
            Row id of the newly written conversation

        Raises:
            ConversationValidationError: If no title can be derived. Nothing
                is written in that case.
            ConversationNotFoundError: If the project is not owned by user_id
            StorageError: If the transaction fails
        """
        ...

    async def load(self, user_id: str, project_id: int, conversation_id: int) -> Conversation:
        """Load one conversation with all its exchanges.

        Raises:
            ConversationNotFoundError: If no owned conversation matches
            ConversationInternalError: If the stored data cannot be decoded
            StorageError: If the query fails
        """
        ...

    async def list_previews(self, user_id: str, project_id: int) -> List[ConversationPreview]:
        """List previews of a project's conversations, most recent first.

        Raises:
            StorageError: If the query fails
        """
        ...

    async def delete(self, user_id: str, project_id: int, conversation_id: int) -> None:
        """Delete one conversation.

        Raises:
            ConversationNotFoundError: If no owned conversation matches
            StorageError: If the statement fails
        """
        ...
