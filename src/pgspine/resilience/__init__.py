"""Resilience layer: profile enrichment, failure classification, health
validation, retry with backoff and outcome rendering.

::

    ConnectionProfileResolver ─ name → ResourceProfile (init-once per name)
    ErrorClassifier           ─ RawFailure → transient | permanent
    HealthValidator           ─ SELECT 1 probe before each attempt
    RetryExecutor             ─ attempts, backoff, Outcome
    OutcomeReporter           ─ Outcome → StructuredResult
"""

from pgspine.resilience.failures import FailureKind, RawFailure
from pgspine.resilience.classifier import (
    ErrorClassification,
    ErrorClassifier,
    FailureClass,
    classify,
)
from pgspine.resilience.outcome import Failure, Outcome, Success
from pgspine.resilience.profiles import (
    ConnectionProfileResolver,
    ProfileDefaults,
    ResourceProfile,
    StaticConnectionStrings,
)
from pgspine.resilience.health import HealthValidator
from pgspine.resilience.reporter import (
    CONNECTION_TEST_ADVICE,
    DEFAULT_ADVICE,
    Advice,
    OutcomeReporter,
    StructuredResult,
)
from pgspine.resilience.retry import RetryExecutor, RetryPolicy

__all__ = [
    "Advice",
    "CONNECTION_TEST_ADVICE",
    "ConnectionProfileResolver",
    "DEFAULT_ADVICE",
    "ErrorClassification",
    "ErrorClassifier",
    "Failure",
    "FailureClass",
    "FailureKind",
    "HealthValidator",
    "Outcome",
    "OutcomeReporter",
    "ProfileDefaults",
    "RawFailure",
    "ResourceProfile",
    "RetryExecutor",
    "RetryPolicy",
    "StaticConnectionStrings",
    "StructuredResult",
    "Success",
    "classify",
]
