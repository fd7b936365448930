class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials, OTPs or tokens are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class DuplicateSubmissionError(DomainError):
    """Raised when a session already exists for the time slot and date."""


class InvalidStateError(DomainError):
    """Raised when entities exist but are inconsistent with each other."""
