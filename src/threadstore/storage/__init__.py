"""Storage layer: declarative base, engine and session management."""

from threadstore.storage.base_model import Base
from threadstore.storage.database import Database, DatabaseConfig

__all__ = ["Base", "Database", "DatabaseConfig"]
