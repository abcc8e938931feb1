"""
Map exceptions raised at the asyncpg boundary onto :class:`RawFailure`.

This is the only place that knows asyncpg's exception types. The mapping
walks ``__cause__`` (or an unsuppressed ``__context__``) so that a wrapper
such as ``HandleUnusableError`` still exposes the socket error it wraps.

=============================  ===================
Exception                      FailureKind
=============================  ===================
asyncpg.PostgresError          DATABASE (+SQLSTATE)
  class 28 / 42501             AUTHORIZATION
TimeoutError                   TIMEOUT
ConnectionError, gaierror      SOCKET
other OSError                  IO
asyncpg.InterfaceError         CLIENT
ResourceNotFoundError          NOT_FOUND
InvalidRequestError            INVALID_REQUEST
HandleUnusableError            HANDLE_UNUSABLE
ConfigError                    CONFIGURATION
anything else                  UNKNOWN
=============================  ===================
"""

from __future__ import annotations

import socket

import asyncpg

from pgspine.core.errors import (
    ConfigError,
    HandleUnusableError,
    InvalidRequestError,
    ResourceNotFoundError,
)
from pgspine.resilience.failures import FailureKind, RawFailure

MAX_CHAIN = 10

# Ordered: subclasses before their bases
_ERROR_KINDS: tuple[tuple[type[BaseException], FailureKind], ...] = (
    (ResourceNotFoundError, FailureKind.NOT_FOUND),
    (InvalidRequestError, FailureKind.INVALID_REQUEST),
    (HandleUnusableError, FailureKind.HANDLE_UNUSABLE),
    (ConfigError, FailureKind.CONFIGURATION),
    (TimeoutError, FailureKind.TIMEOUT),
    (ConnectionError, FailureKind.SOCKET),
    (socket.gaierror, FailureKind.SOCKET),
    (OSError, FailureKind.IO),
    (asyncpg.InterfaceError, FailureKind.CLIENT),
)


def sqlstate_of(exc: BaseException) -> str | None:
    """SQLSTATE carried by a server error, if any."""
    if isinstance(exc, asyncpg.PostgresError):
        code = getattr(exc, "sqlstate", None)
        return code or None
    return None


def failure_kind(exc: BaseException) -> FailureKind:
    """Tag for a single exception, ignoring its causes."""
    if isinstance(exc, asyncpg.PostgresError):
        code = sqlstate_of(exc) or ""
        if code.startswith("28") or code == "42501":
            return FailureKind.AUTHORIZATION
        return FailureKind.DATABASE
    for exc_type, kind in _ERROR_KINDS:
        if isinstance(exc, exc_type):
            return kind
    return FailureKind.UNKNOWN


def _cause_of(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if not exc.__suppress_context__:
        return exc.__context__
    return None


def to_raw_failure(exc: BaseException, *, max_chain: int = MAX_CHAIN) -> RawFailure:
    """Convert ``exc`` and up to ``max_chain - 1`` causes into a RawFailure chain."""
    links: list[BaseException] = [exc]
    seen = {id(exc)}
    current = _cause_of(exc)
    while current is not None and id(current) not in seen and len(links) < max_chain:
        seen.add(id(current))
        links.append(current)
        current = _cause_of(current)

    failure = _link(links[-1], None)
    for link in reversed(links[:-1]):
        failure = _link(link, failure)
    return failure


def _link(exc: BaseException, cause: RawFailure | None) -> RawFailure:
    return RawFailure(
        message=str(exc) or type(exc).__name__,
        kind=failure_kind(exc),
        diagnostic_code=sqlstate_of(exc),
        cause=cause,
        error_type=type(exc).__name__,
    )


__all__ = ["MAX_CHAIN", "failure_kind", "sqlstate_of", "to_raw_failure"]
