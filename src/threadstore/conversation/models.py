"""Conversation domain models.

A conversation is an ordered list of exchanges identified by a stable
``thread_id``. Exchanges are stored as an opaque JSON blob; only the first
exchange's query is inspected, to derive the conversation title.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from threadstore.conversation.errors import ConversationValidationError


class CompressedExchange(BaseModel):
    """Transport form of an exchange returned on detail reads.

    Attributes:
        id: Exchange identifier
        query: The user's question
        answer: The assistant's answer
        paths: Files the answer refers to
        focused_path: Path of the focused chunk, if one was selected
        conclusion: Short conclusion text
        search_step_count: Number of search steps taken
        code_chunk_count: Number of code chunks gathered
        response_time: Seconds taken to answer
        query_timestamp: When the query was asked
    """

    id: UUID
    query: Optional[str] = None
    answer: Optional[str] = None
    paths: List[str] = Field(default_factory=list)
    focused_path: Optional[str] = None
    conclusion: Optional[str] = None
    search_step_count: int = 0
    code_chunk_count: int = 0
    response_time: Optional[float] = None
    query_timestamp: Optional[datetime] = None


class Exchange(BaseModel):
    """One turn of a conversation: a query and everything produced to answer it.

    Unknown fields are kept as-is so that an exchange survives a store/load
    cycle unchanged.

    Attributes:
        id: Exchange identifier
        query: The user's question; the first exchange's query titles the conversation
        answer: The assistant's answer
        paths: Files the answer refers to
        search_steps: Raw search steps taken while answering
        code_chunks: Code chunks gathered while answering
        focused_chunk: Chunk the answer focuses on, if any
        conclusion: Short conclusion text
        response_time: Seconds taken to answer
        query_timestamp: When the query was asked
    """

    id: UUID = Field(default_factory=uuid4)
    query: Optional[str] = None
    answer: Optional[str] = None
    paths: List[str] = Field(default_factory=list)
    search_steps: List[Dict[str, Any]] = Field(default_factory=list)
    code_chunks: List[Dict[str, Any]] = Field(default_factory=list)
    focused_chunk: Optional[Dict[str, Any]] = None
    conclusion: Optional[str] = None
    response_time: Optional[float] = None
    query_timestamp: Optional[datetime] = None

    model_config = ConfigDict(extra="allow")

    def compressed(self) -> CompressedExchange:
        """Project this exchange into its smaller transport form.

        Search steps and code chunks are reduced to counts; the focused chunk
        is reduced to its file path.
        """
        focused_path = None
        if self.focused_chunk:
            focused_path = self.focused_chunk.get("file_path") or self.focused_chunk.get("path")

        return CompressedExchange(
            id=self.id,
            query=self.query,
            answer=self.answer,
            paths=list(self.paths),
            focused_path=focused_path,
            conclusion=self.conclusion,
            search_step_count=len(self.search_steps),
            code_chunk_count=len(self.code_chunks),
            response_time=self.response_time,
            query_timestamp=self.query_timestamp,
        )


_exchange_list = TypeAdapter(List[Exchange])


def serialize_exchanges(exchanges: List[Exchange]) -> str:
    """Encode exchanges as the JSON text stored in the conversations table."""
    return _exchange_list.dump_json(exchanges).decode("utf-8")


def deserialize_exchanges(blob: str) -> List[Exchange]:
    """Decode the stored JSON text back into exchanges.

    Raises:
        pydantic.ValidationError: If the blob is not a valid exchange list
    """
    return _exchange_list.validate_json(blob)


def derive_title(exchanges: List[Exchange]) -> str:
    """Return the conversation title: the first line of the first query.

    Args:
        exchanges: Exchanges in turn order

    Returns:
        Text of the first exchange's query up to the first newline

    Raises:
        ConversationValidationError: If there are no exchanges or the first
            exchange has no query text
    """
    if not exchanges:
        raise ConversationValidationError("couldn't find conversation title: no exchanges")

    query = exchanges[0].query
    if not query:
        raise ConversationValidationError(
            "couldn't find conversation title: first exchange has no query"
        )

    return query.split("\n", 1)[0]


class Conversation(BaseModel):
    """A conversation thread within a project.

    Attributes:
        thread_id: Caller-facing identity, stable across every save
        project_id: Project the conversation belongs to
        exchanges: Exchanges in turn order
    """

    thread_id: UUID = Field(default_factory=uuid4)
    project_id: int
    exchanges: List[Exchange] = Field(default_factory=list)

    @classmethod
    def new(cls, project_id: int) -> "Conversation":
        """Start a new, empty conversation with a fresh thread id."""
        return cls(project_id=project_id)

    def title(self) -> str:
        """Derive the title this conversation would be saved under."""
        return derive_title(self.exchanges)


class ConversationPreview(BaseModel):
    """Listing entry for a stored conversation. Never carries exchanges."""

    id: int
    created_at: int
    title: str


class ConversationId(BaseModel):
    """Key identifying one stored conversation as seen by one user.

    Frozen so it can be used as a dict key or set member.
    """

    conversation_id: int
    project_id: int
    user_id: str

    model_config = ConfigDict(frozen=True)
