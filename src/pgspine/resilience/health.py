"""
Cheap liveness validation of a resource handle before real work.

The probe is a ``SELECT 1`` round-trip with its own short timeout, distinct
from the operation timeout. A handle that is not open yet is opened first;
failures while *opening* propagate (they are ordinary attempt failures and
get classified), while failures of the *probe* are reported as ``False``.
"""

from __future__ import annotations

from typing import Protocol

from pgspine.core.logging import get_logger, safe_log

logger = get_logger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0


class ResourceHandle(Protocol):
    """What the validator and operations need from a pooled handle."""

    @property
    def is_open(self) -> bool: ...

    async def open(self) -> None: ...

    async def probe(self, timeout: float) -> None: ...


class HealthValidator:
    """Probe handles with ``SELECT 1`` before an operation uses them."""

    def __init__(self, probe_timeout: float = DEFAULT_PROBE_TIMEOUT) -> None:
        if probe_timeout <= 0:
            raise ValueError("probe_timeout must be > 0")
        self.probe_timeout = probe_timeout

    async def ensure_live(self, handle: ResourceHandle, probe_timeout: float | None = None) -> bool:
        """Open ``handle`` if needed and probe it.

        Returns:
            True if the probe round-trip succeeded, False otherwise

        Raises:
            Whatever ``handle.open()`` raises
        """
        if not handle.is_open:
            await handle.open()

        timeout = probe_timeout if probe_timeout is not None else self.probe_timeout
        try:
            await handle.probe(timeout)
            return True
        except Exception as e:  # noqa: BLE001
            safe_log(
                logger,
                "debug",
                "health_probe_failed",
                error_type=type(e).__name__,
                error=str(e),
                timeout=timeout,
            )
            return False


__all__ = ["DEFAULT_PROBE_TIMEOUT", "HealthValidator", "ResourceHandle"]
