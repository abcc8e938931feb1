"""
Transient vs. permanent classification of attempt failures.

Rules, applied to the failure and then to each wrapped cause:

1. A link carrying a SQLSTATE is decided by it: transient when the code is in
   :data:`TRANSIENT_SQLSTATES`, permanent otherwise. The walk stops there.
2. A link whose kind is network-level (socket, I/O, timeout) is transient.
3. Anything else defers to its cause. Running out of causes, hitting
   :data:`MAX_CAUSE_DEPTH` or revisiting a link means permanent.

Example:
    >>> classify(RawFailure("deadlock detected", FailureKind.DATABASE, "40P01")).kind
    <FailureClass.TRANSIENT: 'transient'>
    >>> classify(RawFailure("duplicate key", FailureKind.DATABASE, "23505")).kind
    <FailureClass.PERMANENT: 'permanent'>
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from pgspine.resilience.failures import FailureKind, RawFailure

MAX_CAUSE_DEPTH = 10

TRANSIENT_SQLSTATES: Mapping[str, str] = {
    # Class 08 - connection exception
    "08000": "connection_exception",
    "08003": "connection_does_not_exist",
    "08006": "connection_failure",
    "08001": "sqlclient_unable_to_establish_sqlconnection",
    "08004": "sqlserver_rejected_establishment_of_sqlconnection",
    # Class 40 - transaction rollback
    "40001": "serialization_failure",
    "40P01": "deadlock_detected",
    # Class 53 - insufficient resources
    "53000": "insufficient_resources",
    "53100": "disk_full",
    "53200": "out_of_memory",
    "53300": "too_many_connections",
}

NETWORK_KINDS: frozenset[FailureKind] = frozenset(
    {FailureKind.SOCKET, FailureKind.IO, FailureKind.TIMEOUT}
)


class FailureClass(str, Enum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"


@dataclass(frozen=True, slots=True)
class ErrorClassification:
    """Verdict for one failure.

    Attributes:
        kind: Transient or permanent
        diagnostic_code: SQLSTATE that decided the verdict, if any
        is_network_level: True when a socket/I/O/timeout link decided it
    """

    kind: FailureClass
    diagnostic_code: str | None = None
    is_network_level: bool = False

    @property
    def is_transient(self) -> bool:
        return self.kind is FailureClass.TRANSIENT

    @classmethod
    def permanent(cls, diagnostic_code: str | None = None) -> ErrorClassification:
        return cls(FailureClass.PERMANENT, diagnostic_code)


class ErrorClassifier:
    """Pure classifier over :class:`RawFailure` chains.

    The tables are fixed per instance; the module-level :func:`classify`
    uses the default tables.
    """

    def __init__(
        self,
        transient_codes: Mapping[str, str] | None = None,
        network_kinds: frozenset[FailureKind] | None = None,
        max_depth: int = MAX_CAUSE_DEPTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self.transient_codes = frozenset(
            TRANSIENT_SQLSTATES if transient_codes is None else transient_codes
        )
        self.network_kinds = NETWORK_KINDS if network_kinds is None else network_kinds
        self.max_depth = max_depth

    def classify(self, failure: RawFailure) -> ErrorClassification:
        for link in failure.chain(limit=self.max_depth):
            if link.diagnostic_code:
                code = link.diagnostic_code.upper()
                if code in self.transient_codes:
                    return ErrorClassification(FailureClass.TRANSIENT, code)
                return ErrorClassification.permanent(code)
            if link.kind in self.network_kinds:
                return ErrorClassification(FailureClass.TRANSIENT, is_network_level=True)
        return ErrorClassification.permanent()

    def is_transient(self, failure: RawFailure) -> bool:
        return self.classify(failure).is_transient


_DEFAULT = ErrorClassifier()


def classify(failure: RawFailure) -> ErrorClassification:
    """Classify with the default transient tables."""
    return _DEFAULT.classify(failure)


__all__ = [
    "MAX_CAUSE_DEPTH",
    "NETWORK_KINDS",
    "TRANSIENT_SQLSTATES",
    "ErrorClassification",
    "ErrorClassifier",
    "FailureClass",
    "classify",
]
