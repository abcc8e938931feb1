"""Retry executor with classified failures, exponential backoff and jitter.

Composes profile resolution, scoped handle acquisition, health validation
and failure classification around an arbitrary async operation::

    Idle → Attempting → Succeeded
                      → BackingOff → Attempting
                      → Failed

Delay after failed attempt ``k`` (milliseconds)::

    min(delay_cap, initial_delay * 2 ** (k - 1) + U[0, jitter))

Example:
    >>> executor = RetryExecutor(resolver, pools)
    >>> outcome = await executor.run(lambda h: h.connection.fetch("SELECT 1"), "reporting")
    >>> outcome.is_success()
    True
"""

from __future__ import annotations

import asyncio
import random
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pgspine.core.errors import HandleUnusableError, InternalError
from pgspine.core.logging import get_logger, safe_log
from pgspine.db.faults import to_raw_failure
from pgspine.resilience.classifier import (
    ErrorClassification,
    ErrorClassifier,
    FailureClass,
)
from pgspine.resilience.failures import FailureKind, RawFailure
from pgspine.resilience.health import HealthValidator, ResourceHandle
from pgspine.resilience.outcome import Failure, Outcome, Success
from pgspine.resilience.profiles import ConnectionProfileResolver, ResourceProfile

T = TypeVar("T")

logger = get_logger(__name__)


class RetryPolicy(BaseModel):
    """Immutable retry budget and backoff shape.

    Attributes:
        max_attempts: Ceiling on operation invocations per call
        initial_delay_ms: Delay before the second attempt (before jitter)
        delay_cap_ms: Upper bound of any single delay
        jitter_ms: Exclusive upper bound of the uniform jitter added
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = Field(default=3, ge=1)
    initial_delay_ms: float = Field(default=500.0, gt=0)
    delay_cap_ms: float = Field(default=5000.0, gt=0)
    jitter_ms: float = Field(default=100.0, ge=0)

    def delay_ms(self, attempt: int, rng: random.Random | None = None) -> float:
        """Delay to wait after failed attempt ``attempt`` (1-based)."""
        jitter = (rng or random).random() * self.jitter_ms
        return min(self.delay_cap_ms, self.initial_delay_ms * 2 ** (attempt - 1) + jitter)

    def with_overrides(self, **overrides: Any) -> RetryPolicy:
        """Validated copy with the non-None ``overrides`` applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        return RetryPolicy.model_validate({**self.model_dump(), **updates})


class RetryPhase(str, Enum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    BACKING_OFF = "backing_off"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TRANSITIONS: dict[RetryPhase, frozenset[RetryPhase]] = {
    RetryPhase.IDLE: frozenset({RetryPhase.ATTEMPTING}),
    RetryPhase.ATTEMPTING: frozenset(
        {RetryPhase.SUCCEEDED, RetryPhase.BACKING_OFF, RetryPhase.FAILED}
    ),
    RetryPhase.BACKING_OFF: frozenset({RetryPhase.ATTEMPTING}),
    RetryPhase.SUCCEEDED: frozenset(),
    RetryPhase.FAILED: frozenset(),
}


@dataclass
class RetryState:
    """Bookkeeping for one ``run()`` call; never shared."""

    attempt: int = 1
    current_delay_ms: float = 0.0
    last_failure: RawFailure | None = None
    phase: RetryPhase = field(default=RetryPhase.IDLE)

    def transition(self, to: RetryPhase) -> None:
        if to not in _TRANSITIONS[self.phase]:
            raise InternalError(f"Illegal retry transition {self.phase.value} -> {to.value}")
        self.phase = to


class HandleProvider(Protocol):
    """Scoped handle acquisition; the handle is released on exit."""

    def acquire(self, profile: ResourceProfile) -> AbstractAsyncContextManager[ResourceHandle]: ...


Operation = Callable[[Any], Awaitable[T]]


class RetryExecutor:
    """Run operations against a named resource with classified retries."""

    def __init__(
        self,
        resolver: ConnectionProfileResolver,
        handles: HandleProvider,
        *,
        policy: RetryPolicy | None = None,
        validator: HealthValidator | None = None,
        classifier: ErrorClassifier | None = None,
        to_failure: Callable[[BaseException], RawFailure] = to_raw_failure,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.resolver = resolver
        self.handles = handles
        self.policy = policy or RetryPolicy()
        self.validator = validator or HealthValidator()
        self.classifier = classifier or ErrorClassifier()
        self._to_failure = to_failure
        self._sleep = sleep
        self._rng = rng or random.Random()

    async def run(
        self,
        operation: Operation[T],
        name: str,
        *,
        operation_name: str | None = None,
        max_attempts: int | None = None,
        initial_delay_ms: float | None = None,
        delay_cap_ms: float | None = None,
    ) -> Outcome[T]:
        """Execute ``operation(handle)`` against resource ``name``.

        Returns:
            Success with the operation's value, or Failure with the last
            failure's classification and the number of attempts made
        """
        op_name = operation_name or getattr(operation, "__name__", "operation")
        try:
            policy = self.policy.with_overrides(
                max_attempts=max_attempts,
                initial_delay_ms=initial_delay_ms,
                delay_cap_ms=delay_cap_ms,
            )
        except ValidationError as e:
            return Failure(ErrorClassification.permanent(), f"Invalid retry policy: {e}", attempts=0)

        state = RetryState(current_delay_ms=policy.initial_delay_ms)
        state.transition(RetryPhase.ATTEMPTING)

        while True:
            try:
                value = await self._attempt(operation, name)
            except Exception as exc:
                failure = self._convert(exc)
                classification = self.classifier.classify(failure)
                state.last_failure = failure
                safe_log(
                    logger,
                    "debug",
                    "attempt_failed",
                    operation=op_name,
                    resource=name,
                    attempt=state.attempt,
                    error_type=failure.error_type,
                    sqlstate=classification.diagnostic_code,
                    transient=classification.is_transient,
                )

                if classification.kind is FailureClass.PERMANENT or state.attempt >= policy.max_attempts:
                    state.transition(RetryPhase.FAILED)
                    return Failure(classification, failure.message, attempts=state.attempt)

                delay_ms = policy.delay_ms(state.attempt, self._rng)
                state.current_delay_ms = delay_ms
                state.transition(RetryPhase.BACKING_OFF)
                safe_log(
                    logger,
                    "warning",
                    f"[Retry] {op_name} attempt {state.attempt}/{policy.max_attempts} failed: {failure.message}",
                    operation=op_name,
                    resource=name,
                    attempt=state.attempt,
                    max_attempts=policy.max_attempts,
                )
                safe_log(
                    logger,
                    "warning",
                    f"[Retry] Waiting {int(delay_ms)}ms before retry...",
                    operation=op_name,
                    resource=name,
                    delay_ms=delay_ms,
                )
                await self._sleep(delay_ms / 1000)
                state.attempt += 1
                state.transition(RetryPhase.ATTEMPTING)
                continue

            state.transition(RetryPhase.SUCCEEDED)
            return Success(value)

    async def _attempt(self, operation: Operation[T], name: str) -> T:
        profile = self.resolver.resolve(name)
        async with self.handles.acquire(profile) as handle:
            if not await self.validator.ensure_live(handle):
                raise HandleUnusableError()
            return await operation(handle)

    def _convert(self, exc: BaseException) -> RawFailure:
        try:
            return self._to_failure(exc)
        except Exception:  # noqa: BLE001
            return RawFailure(str(exc) or type(exc).__name__, FailureKind.UNKNOWN, error_type=type(exc).__name__)


__all__ = [
    "HandleProvider",
    "RetryExecutor",
    "RetryPhase",
    "RetryPolicy",
    "RetryState",
]
