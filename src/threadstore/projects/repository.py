"""SQL-backed project registry.

Projects are created and read here; the conversation layer only ever joins
against them.
"""

from typing import Optional

from sqlalchemy import select

from threadstore.observability.logging import get_logger
from threadstore.projects.models import Project
from threadstore.projects.orm import ProjectModel
from threadstore.storage.database import Database

logger = get_logger(__name__)


class SQLProjectRepository:
    """Creates and looks up projects.

    Attributes:
        db: Database instance for session management
    """

    def __init__(self, db: Database):
        self.db = db

    async def create_project(self, user_id: str) -> Project:
        """Create a project owned by ``user_id``.

        Raises:
            ValueError: If user_id is empty
        """
        if not user_id or not user_id.strip():
            raise ValueError("user_id cannot be empty")

        async with self.db.session() as session:
            project_orm = ProjectModel(user_id=user_id)
            session.add(project_orm)
            await session.flush()
            await session.refresh(project_orm)
            project = Project(id=project_orm.id, user_id=project_orm.user_id)

        logger.info("project_created", project_id=project.id, user_id=user_id)
        return project

    async def get_project(self, project_id: int, user_id: str) -> Optional[Project]:
        """Get a project if it exists and belongs to ``user_id``."""
        async with self.db.session() as session:
            stmt = select(ProjectModel).where(
                ProjectModel.id == project_id,
                ProjectModel.user_id == user_id,
            )
            result = await session.execute(stmt)
            project_orm = result.scalar_one_or_none()

            if project_orm is None:
                return None

            return Project(id=project_orm.id, user_id=project_orm.user_id)
