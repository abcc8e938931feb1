"""
Failure vocabulary shared by the client boundary and the classifier.

A :class:`RawFailure` is what an attempt produced when it did not succeed.
It is built once, at the boundary where the database client raised, so the
classifier only ever sees a closed set of :class:`FailureKind` tags and an
optional SQLSTATE, never arbitrary exception types.

Example:
    >>> inner = RawFailure("connection reset by peer", FailureKind.SOCKET)
    >>> outer = RawFailure("query failed", FailureKind.CLIENT, cause=inner)
    >>> [f.kind for f in outer.chain()]
    [<FailureKind.CLIENT: 'client'>, <FailureKind.SOCKET: 'socket'>]
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    """Closed set of failure shapes the client boundary can report."""

    DATABASE = "database"                # server error carrying a SQLSTATE
    SOCKET = "socket"                    # connection refused/reset, DNS
    IO = "io"                            # other OS-level I/O failure
    TIMEOUT = "timeout"                  # connect/command/probe timeout
    NOT_FOUND = "not_found"              # unknown logical resource
    INVALID_REQUEST = "invalid_request"  # malformed caller input
    HANDLE_UNUSABLE = "handle_unusable"  # health probe failed
    AUTHORIZATION = "authorization"      # rejected credentials/privileges
    CONFIGURATION = "configuration"      # bad profile or config file
    CLIENT = "client"                    # client library misuse/protocol state
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class RawFailure:
    """
    An attempt's failure, detached from the exception that carried it.

    Attributes:
        message: Human-readable message of the original error
        kind: Tag chosen at the client boundary
        diagnostic_code: Five-character SQLSTATE, when the server sent one
        cause: The failure this one wraps, if any
        error_type: Name of the originating exception type (for logs)
    """

    message: str
    kind: FailureKind = FailureKind.UNKNOWN
    diagnostic_code: str | None = None
    cause: RawFailure | None = None
    error_type: str = ""

    def chain(self, limit: int | None = None) -> Iterator[RawFailure]:
        """Yield this failure and its causes, outermost first.

        Stops after ``limit`` links or when a link repeats.
        """
        seen: set[int] = set()
        current: RawFailure | None = self
        while current is not None and id(current) not in seen:
            if limit is not None and len(seen) >= limit:
                return
            seen.add(id(current))
            yield current
            current = current.cause

    def __str__(self) -> str:
        return self.message


__all__ = ["FailureKind", "RawFailure"]
