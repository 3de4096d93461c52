"""
Domain Exceptions

Errors raised by the integrations and services. Routes translate them into
HTTP responses; the sync engine decides which ones are fatal to a run.
"""

from typing import List, Optional


class ExecutionTrackerError(Exception):
    """Base class for all application errors."""


class ConfigurationError(ExecutionTrackerError):
    """Raised when required credentials are not configured."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required configuration: {', '.join(missing)}")


class MessageSourceError(ExecutionTrackerError):
    """Raised when the Slack history listing fails. Fatal to a sync run."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message)


class FileDownloadError(ExecutionTrackerError):
    """Raised when a Slack file cannot be downloaded."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class BlobStoreError(ExecutionTrackerError):
    """Raised when an object cannot be written to the blob store."""


class NotFoundError(ExecutionTrackerError):
    """Raised when a referenced row does not exist."""


class InvalidTransitionError(ExecutionTrackerError):
    """Raised when a photo review would break the status lifecycle."""


class ConflictError(ExecutionTrackerError):
    """Raised when a store or brand name is already taken."""
