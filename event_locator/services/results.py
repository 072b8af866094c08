"""Result type returned by every provider tier."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from event_locator.exceptions import ProviderError

T = TypeVar("T")


class TierStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    FAILURE = "failure"


@dataclass(frozen=True)
class TierResult(Generic[T]):
    """Outcome of one tier: a value, no data, or a provider error.

    Lets callers and tests tell "nothing found" apart from "provider broke"
    without inspecting logs.
    """
    status: TierStatus
    value: Optional[T] = None
    error: Optional[ProviderError] = None
    source: str = ""

    @classmethod
    def success(cls, value: T, source: str = "") -> "TierResult[T]":
        return cls(TierStatus.SUCCESS, value=value, source=source)

    @classmethod
    def empty(cls, source: str = "") -> "TierResult[T]":
        return cls(TierStatus.EMPTY, source=source)

    @classmethod
    def failure(cls, error: ProviderError, source: str = "") -> "TierResult[T]":
        return cls(TierStatus.FAILURE, error=error, source=source or error.provider)

    @property
    def ok(self) -> bool:
        return self.status is TierStatus.SUCCESS

    @property
    def reason(self) -> str:
        """Short description for logs."""
        if self.error is not None:
            return f"{type(self.error).__name__}: {self.error}"
        return self.status.value
