"""
Cooperative cancellation for long-running scans.
"""

from __future__ import annotations

import threading

from secrethunter.core.errors import ScanCancelled


class CancellationToken:
    """Simple cooperative cancellation token shared by a scan and its workers."""

    def __init__(self) -> None:
        self._ev = threading.Event()

    def cancel(self) -> None:
        """Signal cancellation."""
        self._ev.set()

    def is_set(self) -> bool:
        """Return True if cancellation was requested."""
        return self._ev.is_set()

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; return True once cancelled."""
        return self._ev.wait(timeout)

    def raise_if_cancelled(self) -> None:
        """Raise ScanCancelled if the token has been cancelled."""
        if self._ev.is_set():
            raise ScanCancelled("scan cancelled")
