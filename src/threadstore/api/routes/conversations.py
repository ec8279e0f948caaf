"""Conversation API route handlers.

All routes are scoped to a project and to the authenticated user. A
conversation in someone else's project answers 404, exactly like one that
does not exist.
"""

from fastapi import APIRouter, Depends, Response

from threadstore.api.dependencies import get_conversation_repository, require_user_id
from threadstore.api.schemas.conversation import (
    StoreConversationRequest,
    StoreConversationResponse,
)
from threadstore.conversation.models import (
    CompressedExchange,
    Conversation,
    ConversationPreview,
)
from threadstore.conversation.repository import ConversationRepository

router = APIRouter(prefix="/api/v1/projects/{project_id}/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationPreview])
async def list_conversations(
    project_id: int,
    user_id: str = Depends(require_user_id),
    repository: ConversationRepository = Depends(get_conversation_repository),
) -> list[ConversationPreview]:
    """List the project's conversations, most recent first.

    Examples:
        >>> GET /api/v1/projects/42/conversations
        >>> [{"id": 7, "created_at": 1700000000, "title": "fix bug"}]
    """
    return await repository.list_previews(user_id, project_id)


@router.put("", response_model=StoreConversationResponse)
async def store_conversation(
    project_id: int,
    body: StoreConversationRequest,
    user_id: str = Depends(require_user_id),
    repository: ConversationRepository = Depends(get_conversation_repository),
) -> StoreConversationResponse:
    """Save the full state of a conversation, replacing any earlier save.

    Examples:
        >>> PUT /api/v1/projects/42/conversations
        >>> {"thread_id": "5f0c...", "exchanges": [{"query": "fix bug\\ndetails"}]}
        >>>
        >>> {"id": 7, "thread_id": "5f0c...", "title": "fix bug"}
    """
    conversation = Conversation(
        thread_id=body.thread_id,
        project_id=project_id,
        exchanges=body.exchanges,
    )
    row_id = await repository.store(conversation, user_id)
    return StoreConversationResponse(
        id=row_id,
        thread_id=conversation.thread_id,
        title=conversation.title(),
    )


@router.get("/{conversation_id}", response_model=list[CompressedExchange])
async def get_conversation(
    project_id: int,
    conversation_id: int,
    user_id: str = Depends(require_user_id),
    repository: ConversationRepository = Depends(get_conversation_repository),
) -> list[CompressedExchange]:
    """Return the conversation's exchanges in compressed form."""
    conversation = await repository.load(user_id, project_id, conversation_id)
    return [exchange.compressed() for exchange in conversation.exchanges]


@router.delete("/{conversation_id}")
async def delete_conversation(
    project_id: int,
    conversation_id: int,
    user_id: str = Depends(require_user_id),
    repository: ConversationRepository = Depends(get_conversation_repository),
) -> Response:
    """Delete a conversation. Responds with an empty body."""
    await repository.delete(user_id, project_id, conversation_id)
    return Response(status_code=200)
