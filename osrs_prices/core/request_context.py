"""
Caller-owned cancellation and deadline token for API calls.

A RequestContext is created by the caller, passed into a client method and
may be cancelled from any thread. The client stops waiting on the request as
soon as the context is cancelled or its deadline passes.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class RequestContext:
    """
    Cancellation flag plus optional deadline.

    Example:
        ctx = RequestContext(timeout=5.0)
        threading.Timer(1.0, ctx.cancel).start()
        client.get_latest_prices(Region.REGULAR, ctx=ctx)
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds from now until the deadline, or None for no deadline
        """
        if timeout is not None and timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {timeout}")

        self.deadline: Optional[float] = (
            time.monotonic() + timeout if timeout is not None else None
        )
        self._cancelled = threading.Event()
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        """Check if cancel() has been called."""
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        """Check if the deadline has passed."""
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline (never negative), or None."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def cancel(self) -> None:
        """
        Request cancellation.

        Safe to call more than once and from any thread; callbacks run once.
        """
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        logger.debug("RequestContext cancellation requested")
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback to run when the context is cancelled.

        Runs immediately if the context is already cancelled.

        Returns:
            A function that unregisters the callback
        """
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)

                def unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return unregister

        callback()
        return lambda: None

    def __repr__(self) -> str:
        return (
            f"RequestContext(cancelled={self.cancelled}, "
            f"remaining={self.remaining()})"
        )
