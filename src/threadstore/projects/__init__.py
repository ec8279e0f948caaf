"""Projects: the ownership root every conversation hangs off."""

from threadstore.projects.models import Project
from threadstore.projects.repository import SQLProjectRepository

__all__ = ["Project", "SQLProjectRepository"]
