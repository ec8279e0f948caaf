"""API request/response schemas."""

from threadstore.api.schemas.conversation import (
    StoreConversationRequest,
    StoreConversationResponse,
)

__all__ = ["StoreConversationRequest", "StoreConversationResponse"]
