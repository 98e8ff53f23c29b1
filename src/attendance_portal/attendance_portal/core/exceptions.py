class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when an operation targets an unknown id."""


class InvalidStateError(DomainError):
    """Raised when a request is not in a state that allows the operation."""


class StorageError(DomainError):
    """Raised when a persisted blob cannot be read or decoded."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
