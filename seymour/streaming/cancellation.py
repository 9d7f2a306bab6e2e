"""Cooperative cancellation scoped to one exchange."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """A one-shot cancellation flag shared by the orchestrator and frame reader.

    ``cancel()`` is synchronous and idempotent. The frame reader waits on the
    token alongside each pending read, so a suspended read is abandoned as
    soon as the token fires instead of waiting for the server to time out.

    Usage::

        token = CancellationToken()
        token.add_callback(lambda: print("stopped"))
        async for frame in iter_frames(chunks, token=token):
            ...
        token.cancel()  # from another task
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._event = asyncio.Event()
        self._callbacks: list[Callable[[], None]] = []
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "cancelled by caller") -> bool:
        """Signal cancellation.

        Returns:
            True if this call cancelled the token, False if it already was.
        """
        if self._cancelled:
            return False
        self._cancelled = True
        self.reason = reason
        self._event.set()
        logger.debug("Cancellation requested: %s", reason)

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancellation callback failed")
        return True

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once on cancellation (immediately if already cancelled)."""
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        await self._event.wait()
