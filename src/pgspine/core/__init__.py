"""Core primitives shared by every pg-spine layer: errors, logging, configuration."""

from pgspine.core.errors import (
    ConfigError,
    HandleUnusableError,
    InternalError,
    InvalidProfileError,
    InvalidRequestError,
    PgSpineError,
    ResourceNotFoundError,
)
from pgspine.core.logging import configure_logging, get_logger, safe_log

__all__ = [
    "ConfigError",
    "HandleUnusableError",
    "InternalError",
    "InvalidProfileError",
    "InvalidRequestError",
    "PgSpineError",
    "ResourceNotFoundError",
    "configure_logging",
    "get_logger",
    "safe_log",
]
