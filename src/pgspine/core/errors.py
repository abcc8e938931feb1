"""
Exception types raised inside pg-spine.

None of these reach tool callers. Every exception raised inside an attempt
is converted into a ``RawFailure`` at the client boundary
(``pgspine.db.faults``), and the classifier decides from there whether it
is worth retrying. Each class below maps to exactly one ``FailureKind``.

Hierarchy::

    PgSpineError
    ├── ConfigError                    CONFIGURATION
    │   ├── ResourceNotFoundError      NOT_FOUND
    │   └── InvalidProfileError        CONFIGURATION
    ├── InvalidRequestError            INVALID_REQUEST
    ├── HandleUnusableError            HANDLE_UNUSABLE
    └── InternalError                  (bugs, impossible state transitions)
"""

from __future__ import annotations


class PgSpineError(Exception):
    """Base exception for all pg-spine errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ConfigError(PgSpineError):
    """Configuration error: unreadable config file, bad profile."""


class ResourceNotFoundError(ConfigError):
    """No connection string is configured for a logical resource name."""

    def __init__(self, name: str, message: str | None = None):
        self.resource_name = name
        super().__init__(
            message
            or f"No connection string found for database '{name}'. "
            "Available databases can be found using list_available_databases()"
        )


class InvalidProfileError(ConfigError):
    """A resource profile violates its invariants."""

    def __init__(self, name: str, reason: str):
        self.resource_name = name
        self.reason = reason
        super().__init__(f"Invalid profile for database '{name}': {reason}")


class InvalidRequestError(PgSpineError):
    """Malformed caller input (empty names, empty SQL text, ...)."""


class HandleUnusableError(PgSpineError):
    """A handle failed its health probe."""

    def __init__(self, message: str = "Failed to establish valid database connection"):
        super().__init__(message)


class InternalError(PgSpineError):
    """Programmer error or impossible state."""


__all__ = [
    "PgSpineError",
    "ConfigError",
    "ResourceNotFoundError",
    "InvalidProfileError",
    "InvalidRequestError",
    "HandleUnusableError",
    "InternalError",
]
