"""Pydantic schemas for conversation API requests and responses."""

from uuid import UUID

from pydantic import BaseModel, Field

from threadstore.conversation.models import Exchange


class StoreConversationRequest(BaseModel):
    """Full state of a conversation to save.

    Attributes:
        thread_id: Client-generated thread identity, reused on every save
        exchanges: All exchanges in turn order
    """

    thread_id: UUID = Field(..., description="Stable conversation thread id")
    exchanges: list[Exchange] = Field(..., description="Exchanges in turn order")


class StoreConversationResponse(BaseModel):
    """Result of saving a conversation.

    Attributes:
        id: Storage row id of the saved conversation (changes on every save)
        thread_id: Thread id the conversation was saved under
        title: Derived conversation title
    """

    id: int = Field(..., description="Storage row id")
    thread_id: UUID = Field(..., description="Stable conversation thread id")
    title: str = Field(..., description="First line of the first query")
