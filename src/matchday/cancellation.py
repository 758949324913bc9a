"""Cooperative cancellation for remote calls.

A resolution is cancelled by calling :meth:`CancellationToken.cancel`. Every
remote call checks the token before it starts, between streamed response
chunks and while waiting out a rate-limit back-off, raising
:class:`OperationCancelled` as soon as the token is set.
"""

from __future__ import annotations

import threading


class OperationCancelled(Exception):
    """The caller withdrew the request."""


class CancellationToken:
    """Thread-safe cancellation flag shared between a caller and its workers."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation cancelled")

    def wait(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless cancelled first, then raise."""
        if self._event.wait(timeout=max(seconds, 0.0)):
            raise OperationCancelled("Operation cancelled")


def check_cancelled(token: CancellationToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()


__all__ = ["CancellationToken", "OperationCancelled", "check_cancelled"]
