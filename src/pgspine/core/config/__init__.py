"""
Configuration for pg-spine.

Re-exports :class:`PgSpineSettings`, the cached :func:`get_settings` factory
and the layered connection-string loader.
"""

from .loader import LayeredConnectionStrings
from .settings import PgSpineSettings, clear_settings_cache, get_settings

__all__ = [
    "LayeredConnectionStrings",
    "PgSpineSettings",
    "clear_settings_cache",
    "get_settings",
]
