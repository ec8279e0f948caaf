"""Conversation domain models, errors and the repository interface.

Import the SQL implementation directly when needed:
    from threadstore.conversation.sql_repository import SQLConversationRepository
"""

from threadstore.conversation.errors import (
    ConversationError,
    ConversationInternalError,
    ConversationNotFoundError,
    ConversationValidationError,
    MissingUserError,
    StorageError,
)
from threadstore.conversation.models import (
    CompressedExchange,
    Conversation,
    ConversationId,
    ConversationPreview,
    Exchange,
)
from threadstore.conversation.repository import ConversationRepository

__all__ = [
    "CompressedExchange",
    "Conversation",
    "ConversationError",
    "ConversationId",
    "ConversationInternalError",
    "ConversationNotFoundError",
    "ConversationPreview",
    "ConversationRepository",
    "ConversationValidationError",
    "Exchange",
    "MissingUserError",
    "StorageError",
]
