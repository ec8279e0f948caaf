"""FastAPI dependencies for caller identity and persistence handles.

The Database lives on ``app.state`` for the lifetime of the application and is
handed to repositories per request; there is no module-level connection.
"""

from fastapi import Depends, Request

from threadstore.conversation.errors import MissingUserError
from threadstore.conversation.repository import ConversationRepository
from threadstore.conversation.sql_repository import SQLConversationRepository
from threadstore.storage.database import Database


def get_database(request: Request) -> Database:
    """Return the Database created by the application lifespan."""
    return request.app.state.database


def get_conversation_repository(
    db: Database = Depends(get_database),
) -> ConversationRepository:
    """Build a conversation repository bound to the application database."""
    return SQLConversationRepository(db)


def require_user_id(request: Request) -> str:
    """Return the authenticated user id set by UserMiddleware.

    Raises:
        MissingUserError: If the request carries no user id
    """
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise MissingUserError()
    return user_id
