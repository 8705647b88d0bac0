"""
Exception hierarchy for the Prelude application.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class PreludeException(Exception):
    """Base exception for all Prelude application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(PreludeException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class SessionNotFoundError(PreludeException):
    """Raised when a student session cannot be found."""

    def __init__(self, session_id: Any, details: dict[str, Any] | None = None) -> None:
        """
        Initialize session not found error.

        Args:
            session_id: ID of the missing session
            details: Additional context
        """
        details = details or {}
        details["session_id"] = str(session_id)
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}", details)


class ConversationNotFoundError(PreludeException):
    """Raised when a chat conversation cannot be found."""

    def __init__(self, conversation_id: Any, details: dict[str, Any] | None = None) -> None:
        """
        Initialize conversation not found error.

        Args:
            conversation_id: ID of the missing conversation
            details: Additional context
        """
        details = details or {}
        details["conversation_id"] = str(conversation_id)
        super().__init__(f"Conversation not found: {conversation_id}", details)


class EventDecodeError(PreludeException):
    """Raised when a stored or submitted event cannot be decoded."""

    def __init__(
        self,
        message: str,
        kind: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize event decode error.

        Args:
            message: Error message
            kind: Event kind that failed to decode
            details: Additional context
        """
        details = details or {}
        if kind:
            details["kind"] = kind
        super().__init__(message, details)


class FlushError(PreludeException):
    """Raised by a capture transport when a batch could not be persisted."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize flush error.

        Args:
            message: Error message
            status_code: HTTP status returned by the persistence endpoint, if any
            details: Additional context
        """
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details)
