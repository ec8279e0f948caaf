"""Shared SQLAlchemy declarative base for all ORM models.

Every threadstore table registers against this one metadata object so that
``create_all`` and ``drop_all`` see the complete schema.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models in threadstore."""

    pass
