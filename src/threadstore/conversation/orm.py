"""SQLAlchemy ORM model for stored conversations."""

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from threadstore.storage.base_model import Base


class ConversationModel(Base):
    """ORM model for a stored conversation.

    One row holds the whole conversation: the exchanges are serialized into a
    single JSON text column. A save replaces the row, so ``id`` changes from
    save to save while ``thread_id`` stays the same.

    Attributes:
        id: Storage row identifier
        thread_id: Stable caller-facing conversation identity (UUID string)
        title: First line of the first exchange's query
        exchanges: JSON-encoded list of exchanges
        project_id: Foreign key to the owning project
        created_at: Epoch seconds when this row was written
    """

    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thread_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    exchanges: Mapped[str] = mapped_column(Text, nullable=False)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)

    # Row ids are never reused, so a stale id cannot address a later conversation
    __table_args__ = (
        Index("idx_conversation_project_created", "project_id", "created_at"),
        {"sqlite_autoincrement": True},
    )
