"""
Render an :class:`Outcome` into the result shape handed to tool callers.

Success::

    {"success": true, "data": ..., **details}

Failure::

    {"success": false, "error": "...", "diagnosticCode": "40P01" | null,
     "isTransient": true, "suggestion": "...", "attempts": 3, **details}

Keys are camelCase because MCP clients consume them as JSON. Details never
override the core keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pgspine.core.logging import get_logger, safe_log
from pgspine.resilience.outcome import Failure, Outcome, Success

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Advice:
    """Suggestion wording for transient and permanent failures."""

    transient: str
    permanent: str

    def for_failure(self, is_transient: bool) -> str:
        return self.transient if is_transient else self.permanent


DEFAULT_ADVICE = Advice(
    transient="This appears to be a transient error. The operation was retried automatically.",
    permanent="This error requires attention and cannot be automatically retried.",
)

CONNECTION_TEST_ADVICE = Advice(
    transient="Connection test failed with a transient error. Retrying automatically.",
    permanent="Connection test failed. Please check your connection string and database availability.",
)


@dataclass
class StructuredResult:
    success: bool
    data: Any = None
    error: str | None = None
    diagnostic_code: str | None = None
    is_transient: bool = False
    suggestion: str | None = None
    attempts: int | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            core: dict[str, Any] = {"success": True, "data": self.data}
        else:
            core = {
                "success": False,
                "error": self.error,
                "diagnosticCode": self.diagnostic_code,
                "isTransient": self.is_transient,
                "suggestion": self.suggestion,
            }
            if self.attempts is not None:
                core["attempts"] = self.attempts
        extra = {k: v for k, v in self.details.items() if k not in core}
        return {**core, **extra}


class OutcomeReporter:
    """Turn outcomes into :class:`StructuredResult` values. Performs no I/O."""

    def __init__(self, advice: Advice = DEFAULT_ADVICE) -> None:
        self.advice = advice

    def render(
        self,
        outcome: Outcome[Any],
        *,
        details: dict[str, Any] | None = None,
        advice: Advice | None = None,
    ) -> StructuredResult:
        try:
            return self._render(outcome, dict(details or {}), advice or self.advice)
        except Exception as e:  # noqa: BLE001
            safe_log(logger, "error", "render_failed", error_type=type(e).__name__, error=str(e))
            return StructuredResult(
                success=False,
                error=f"Failed to render result: {e}",
                suggestion=(advice or self.advice).permanent,
            )

    def _render(self, outcome: Outcome[Any], details: dict[str, Any], advice: Advice) -> StructuredResult:
        match outcome:
            case Success(value):
                return StructuredResult(success=True, data=value, details=details)
            case Failure(classification, message, attempts):
                return StructuredResult(
                    success=False,
                    error=message,
                    diagnostic_code=classification.diagnostic_code,
                    is_transient=classification.is_transient,
                    suggestion=advice.for_failure(classification.is_transient),
                    attempts=attempts,
                    details=details,
                )
        raise TypeError(f"Not an outcome: {type(outcome).__name__}")


__all__ = [
    "CONNECTION_TEST_ADVICE",
    "DEFAULT_ADVICE",
    "Advice",
    "OutcomeReporter",
    "StructuredResult",
]
