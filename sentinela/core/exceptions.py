"""Custom exceptions for the Sentinela service."""
from typing import Optional


class SentinelaError(Exception):
    """Base exception for Sentinela operations."""

    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize Sentinela error.

        Args:
            message: Error description
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidImageError(SentinelaError):
    """Raised when the query image is missing or of an unsupported type."""
    error_code = "INVALID_IMAGE"


class InvalidSearchParamsError(SentinelaError):
    """Raised when search limit or threshold fall outside their valid ranges."""
    error_code = "INVALID_SEARCH_PARAMS"


class EmbeddingExtractionError(SentinelaError):
    """Raised when no usable face embedding could be extracted from the query image."""
    error_code = "EMBEDDING_EXTRACTION_FAILED"


class NotFoundError(SentinelaError):
    """Raised when a requested record does not exist."""
    error_code = "NOT_FOUND"

    @classmethod
    def for_entity(cls, entity: str, entity_id: int) -> "NotFoundError":
        return cls(
            f"{entity} with ID {entity_id} not found",
            details={"entity": entity, "id": entity_id},
        )


class ConflictError(SentinelaError):
    """Raised when a record would violate a uniqueness rule."""
    error_code = "ALREADY_EXISTS"


class ConfidentialAccessError(SentinelaError):
    """Raised when a caller without the required role opens a confidential record."""
    error_code = "FORBIDDEN"


class UnauthorizedError(SentinelaError):
    """Raised when the caller identity is missing or malformed."""
    error_code = "UNAUTHORIZED"


class VectorStoreError(SentinelaError):
    """Base exception for embedding store operations."""
    error_code = "VECTOR_STORE_ERROR"


class ServiceNotInitializedError(SentinelaError):
    """Raised when a service is requested before the container is initialized."""
    error_code = "SERVICE_UNAVAILABLE"
