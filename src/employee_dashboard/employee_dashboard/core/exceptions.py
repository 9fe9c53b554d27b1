class DomainError(Exception):
    """Base exception for the dashboard backend."""


class ValidationError(DomainError):
    """Raised when a required argument is missing or malformed, before storage is touched."""


class StorageError(DomainError):
    """Raised when the record storage rejects or fails a request.

    The message is the backend's own text, forwarded verbatim.
    """


class AuditLogError(DomainError):
    """Raised when an operation log entry cannot be written."""
