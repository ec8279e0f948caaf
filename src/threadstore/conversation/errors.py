"""Exceptions raised by the conversation persistence layer.

Each error carries a machine-readable code and the HTTP status the API layer
maps it to.
"""


class ConversationError(Exception):
    """Base exception for all conversation errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status code for API responses
    """

    def __init__(self, message: str, code: str, status_code: int) -> None:
        """Initialize conversation error.

        Args:
            message: Human-readable error description
            code: Machine-readable error code
            status_code: HTTP status code (400, 404, 500, etc.)
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class ConversationValidationError(ConversationError):
    """Raised when a conversation cannot be saved in its current shape.

    Raised before any statement touches the database.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="validation_error", status_code=400)


class ConversationNotFoundError(ConversationError):
    """Raised when no conversation matches id, project and owner.

    The message never says which of the three failed to match.
    """

    def __init__(self) -> None:
        super().__init__(
            message="conversation not found",
            code="conversation_not_found",
            status_code=404,
        )


class StorageError(ConversationError):
    """Raised when the database rejects or fails a statement or commit."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="storage_error", status_code=503)


class ConversationInternalError(ConversationError):
    """Raised when a stored conversation cannot be decoded."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="internal_error", status_code=500)


class MissingUserError(ConversationError):
    """Raised when a request reaches a conversation route without a user id."""

    def __init__(self) -> None:
        super().__init__(message="missing user ID", code="missing_user_id", status_code=401)
