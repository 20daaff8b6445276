"""
Typed result for the boundary layer.

Outcome holds either a value or one of the jobboard errors, so a caller has
to look at both paths instead of relying on an exception escaping.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .errors import JobBoardError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    error: Optional[JobBoardError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value


def attempt(func: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    """Call func and capture a JobBoardError as a failed Outcome.

    Anything that is not a JobBoardError is a bug and propagates.
    """
    try:
        return Outcome(value=func(*args, **kwargs))
    except JobBoardError as e:
        return Outcome(error=e)
