"""Ownership filter shared by every conversation query.

A conversation is visible to a user only through its project: the project
row must exist and carry that user's id. Every read, write and delete on the
conversations table goes through one of the predicates below, so access
control lives in exactly one place.
"""

from sqlalchemy import exists
from sqlalchemy.sql.expression import ColumnElement, Exists

from threadstore.conversation.orm import ConversationModel
from threadstore.projects.orm import ProjectModel

# Core tables, so the predicates work in Core DELETE/INSERT as well as ORM SELECT
_projects = ProjectModel.__table__
_conversations = ConversationModel.__table__


def project_owned_by(user_id: str, project_id: int) -> ColumnElement[bool]:
    """Predicate on ``projects``: the given project belongs to ``user_id``.

    Used where a statement selects from ``projects`` directly, such as the
    insert half of a save.
    """
    return (_projects.c.id == project_id) & (_projects.c.user_id == user_id)


def conversation_owned_by(user_id: str) -> Exists:
    """Predicate on ``conversations``: the row's project belongs to ``user_id``.

    Renders as a correlated ``EXISTS`` against ``projects`` and can be placed
    in the WHERE clause of a SELECT or DELETE on ``conversations``.
    """
    return (
        exists()
        .where(
            _projects.c.id == _conversations.c.project_id,
            _projects.c.user_id == user_id,
        )
        .correlate(_conversations)
    )
