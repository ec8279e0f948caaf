"""threadstore: ownership-scoped persistence for project conversation threads."""

__version__ = "0.1.0"
