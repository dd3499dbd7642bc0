# core/exceptions.py

class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str,*, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when input is missing or malformed at the mutation boundary."""


class NotFoundError(DomainError):
    """Raised when an entity is not found."""


class ConflictError(DomainError):
    """Raised when a precondition is violated (double claim, duplicate link)."""


class UnauthorizedError(DomainError):
    """Raised when no agent identity resolves or the role is insufficient."""
