"""Tagged results returned by pipeline components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    OK = "ok"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass(slots=True)
class Outcome(Generic[T]):
    """A value plus how it was obtained.

    ``FALLBACK`` carries a usable but degraded value, ``FAILED`` carries the
    substitute the caller should use instead. Neither is fatal.
    """

    status: OutcomeStatus
    value: T
    reason: str | None = None

    @classmethod
    def ok(cls, value: T) -> "Outcome[T]":
        return cls(OutcomeStatus.OK, value)

    @classmethod
    def fallback(cls, value: T, reason: str) -> "Outcome[T]":
        return cls(OutcomeStatus.FALLBACK, value, reason)

    @classmethod
    def failed(cls, value: T, reason: str) -> "Outcome[T]":
        return cls(OutcomeStatus.FAILED, value, reason)

    @property
    def degraded(self) -> bool:
        return self.status is not OutcomeStatus.OK


__all__ = ["Outcome", "OutcomeStatus"]
