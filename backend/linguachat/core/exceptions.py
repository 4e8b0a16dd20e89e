"""Custom exception classes for structured error handling."""

from typing import Any


class LinguaChatError(Exception):
    """Base exception for all LinguaChat errors."""

    def __init__(self, code: str, message: str, status_code: int = 500) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


class ConversationNotFoundError(LinguaChatError):
    def __init__(self, message: str = "Conversation not found") -> None:
        super().__init__(code="CONVERSATION_NOT_FOUND", message=message, status_code=404)


class MessageNotFoundError(LinguaChatError):
    def __init__(self, message: str = "Message not found") -> None:
        super().__init__(code="MESSAGE_NOT_FOUND", message=message, status_code=404)


class InvalidStatusTransitionError(LinguaChatError):
    def __init__(self, message: str = "Invalid message status transition") -> None:
        super().__init__(
            code="INVALID_STATUS_TRANSITION", message=message, status_code=409
        )


class TranslationError(LinguaChatError):
    def __init__(self, message: str = "Translation failed") -> None:
        super().__init__(code="TRANSLATION_FAILED", message=message, status_code=502)


class PersistenceError(LinguaChatError):
    def __init__(self, message: str = "Persistence operation failed") -> None:
        super().__init__(code="PERSISTENCE_FAILED", message=message, status_code=503)


class DatabaseConnectionError(LinguaChatError):
    def __init__(self, message: str = "Database connection failed") -> None:
        super().__init__(code="DATABASE_CONNECTION_ERROR", message=message, status_code=503)
