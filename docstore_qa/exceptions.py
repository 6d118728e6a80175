"""Application exception hierarchy.

All custom exceptions inherit from QAPlatformError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "QA-1000"

    # Document store errors (2xxx)
    DOCUMENT_STORE_ERROR = "QA-2000"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "QA-3000"
    EMBEDDING_DIMENSION_MISMATCH = "QA-3001"

    # Vector store errors (4xxx)
    VECTOR_STORE_ERROR = "QA-4000"
    COLLECTION_NOT_FOUND = "QA-4001"

    # LLM errors (5xxx)
    LLM_SERVICE_ERROR = "QA-5000"
    LLM_TIMEOUT = "QA-5001"
    LLM_MODEL_NOT_FOUND = "QA-5002"


class QAPlatformError(Exception):
    """Base exception for all document QA errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dictionary."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class DocumentStoreError(QAPlatformError):
    """Source document store error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DOCUMENT_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class EmbeddingError(QAPlatformError):
    """Embedding service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class VectorStoreError(QAPlatformError):
    """Vector store operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class LLMError(QAPlatformError):
    """Generation model error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
