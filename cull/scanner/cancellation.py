"""
Cooperative cancellation for scans.

A CancellationToken is shared between the caller and the scanning thread.
The scanner checks it once per unit of work (each enumerated file, each
digest, each fingerprint) and raises CancellationError when it is set.
"""

from __future__ import annotations

import threading
from typing import Optional

from ..exceptions import CancellationError


class CancellationToken:
    """Thread-safe cancellation flag."""

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        """Check if cancel has been requested."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation of the scan holding this token."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise CancellationError if cancellation was requested."""
        if self._event.is_set():
            raise CancellationError()


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise CancellationError if token is set; a None token never cancels."""
    if token is not None:
        token.raise_if_cancelled()


__all__ = ['CancellationToken', 'check_cancelled']
