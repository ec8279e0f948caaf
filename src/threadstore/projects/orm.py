"""SQLAlchemy ORM model for projects."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from threadstore.storage.base_model import Base


class ProjectModel(Base):
    """ORM model for projects.

    A project is owned by exactly one user. Conversation access is always
    checked against this ownership.

    Attributes:
        id: Integer project identifier
        user_id: Identifier of the owning user
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
