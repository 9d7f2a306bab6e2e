"""Transport contract required by the exchange orchestrator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from contextlib import AbstractAsyncContextManager

    from seymour.client.models import ChatRequest


class ChatTransport(Protocol):
    """Opens response streams and creates sessions.

    ``open_stream`` returns an async context manager yielding the raw body
    chunks. Leaving the context must close the underlying connection so
    the backend stops producing frames. Failures are raised as
    :class:`~seymour.exceptions.TransportError`.
    """

    def open_stream(
        self, request: ChatRequest
    ) -> AbstractAsyncContextManager[AsyncIterator[bytes]]: ...

    async def create_session(self, model_key: str) -> str: ...
