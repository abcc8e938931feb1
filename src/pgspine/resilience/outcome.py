"""
Outcome envelope returned by the retry executor.

``Outcome[T]`` is either :class:`Success` carrying the operation's value or
:class:`Failure` carrying the classification of the last failure, its
message and the number of attempts made. It is the only thing that leaves
the resilience layer; exceptions stay inside a single attempt.

Usage:
    outcome = await executor.run(fetch_rows, "reporting")
    match outcome:
        case Success(rows):
            publish(rows)
        case Failure(classification, message, attempts):
            alert(message, transient=classification.is_transient)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from pgspine.resilience.classifier import ErrorClassification

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Successful outcome containing the operation's value."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Success({self.value!r})"


@dataclass(frozen=True, slots=True)
class Failure(Generic[T]):
    """Terminal failure after one or more attempts.

    Attributes:
        classification: Verdict for the last failure
        message: Message of the last failure
        attempts: Number of attempts made (0 when rejected before any attempt)
    """

    classification: ErrorClassification
    message: str
    attempts: int = 1

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Failure({self.message!r}, {self.classification.kind.value}, attempts={self.attempts})"


# Type alias for Outcome
Outcome = Success[T] | Failure[T]


__all__ = ["Failure", "Outcome", "Success"]
