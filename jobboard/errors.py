"""
Error taxonomy for the data-access layer.

ValidationError, NotFoundError and ConstraintViolation are caller errors;
StoreError is everything else the executor can throw at us.
"""

from typing import Any, List, Optional


class JobBoardError(Exception):
    """Base exception for jobboard."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class ValidationError(JobBoardError):
    """Raised when a payload or filter is rejected before touching the store."""

    def __init__(self, message: str = "", errors: Optional[List[str]] = None):
        self.errors = list(errors or [])
        super().__init__(message)


class NotFoundError(JobBoardError):
    """Raised when an id does not resolve to a row."""

    def __init__(self, entity: str, ident: Any):
        self.entity = entity
        self.ident = ident
        super().__init__(f"No {entity}: {ident}")


class ConstraintViolation(JobBoardError):
    """Raised when the store rejects a write (foreign key, check, uniqueness)."""
    pass


class StoreError(JobBoardError):
    """Raised for any other executor failure (connectivity, syntax, timeout)."""
    pass
