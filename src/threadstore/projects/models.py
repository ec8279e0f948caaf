"""Project domain model."""

from pydantic import BaseModel, ConfigDict


class Project(BaseModel):
    """A project owned by a single user."""

    id: int
    user_id: str

    model_config = ConfigDict(frozen=True)
