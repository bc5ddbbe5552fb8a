from typing import Any


class ContractLifecycleError(Exception):
    """Base class for errors surfaced through the API with a status code."""

    status_code: int = 500

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ContractLifecycleError):
    """Raised when required input is missing or malformed."""

    status_code = 422


class FileTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413


class NotFoundError(ContractLifecycleError):
    """Raised when a record does not exist or is not owned by the caller."""

    status_code = 404


class UnauthorizedError(ContractLifecycleError):
    """Raised when the bearer credential is missing, invalid or expired."""

    status_code = 401


class InvalidStatusTransitionError(ContractLifecycleError):
    """Raised when a document status change is not allowed."""

    status_code = 409


class UnsupportedFormatError(ContractLifecycleError):
    """Raised when a file type cannot be determined or has no extractor."""

    status_code = 415


class ExtractionError(ContractLifecycleError):
    """Raised when downloading or parsing a file fails."""

    status_code = 502


class StorageError(ContractLifecycleError):
    """Raised when the object store rejects an upload or delete."""

    status_code = 502


class ForbiddenError(ContractLifecycleError):
    """Raised when the caller is authenticated but may not touch the target."""

    status_code = 403
