"""Fakes and builders for streaming tests."""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator, Iterable

    from seymour.client.models import ChatRequest


def sse(payload: dict[str, Any]) -> bytes:
    """Encode one event as a ``data:`` frame followed by a blank line."""
    return f"data: {json.dumps(payload)}\n\n".encode()


def sse_stream(*payloads: dict[str, Any]) -> list[bytes]:
    return [sse(p) for p in payloads]


async def async_iter(items: Iterable[Any]) -> AsyncGenerator[Any, None]:
    """Convert a list to an async iterator."""
    for item in items:
        yield item


class FakeTransport:
    """In-memory ChatTransport.

    Args:
        chunks: Body chunks yielded by every stream.
        session_id: Returned by ``create_session``.
        open_error: Raised when a stream is opened.
        fail_after: Raised after all chunks were yielded.
        session_error: Raised by ``create_session``.
        hang: Block forever after the chunks (until cancelled).
    """

    def __init__(
        self,
        chunks: Iterable[bytes] = (),
        *,
        session_id: str = "session-new",
        open_error: Exception | None = None,
        fail_after: Exception | None = None,
        session_error: Exception | None = None,
        hang: bool = False,
    ) -> None:
        self.chunks = list(chunks)
        self.session_id = session_id
        self.open_error = open_error
        self.fail_after = fail_after
        self.session_error = session_error
        self.hang = hang
        self.requests: list[ChatRequest] = []
        self.session_requests: list[str] = []
        self.opened = asyncio.Event()
        self.chunks_sent = 0
        self.closed = False

    @asynccontextmanager
    async def open_stream(self, request: ChatRequest) -> AsyncGenerator[AsyncIterator[bytes], None]:
        self.requests.append(request)
        if self.open_error is not None:
            raise self.open_error
        self.opened.set()
        try:
            yield self._body()
        finally:
            self.closed = True

    async def _body(self) -> AsyncGenerator[bytes, None]:
        for chunk in self.chunks:
            self.chunks_sent += 1
            yield chunk
        if self.fail_after is not None:
            raise self.fail_after
        if self.hang:
            await asyncio.Event().wait()

    async def create_session(self, model_key: str) -> str:
        self.session_requests.append(model_key)
        if self.session_error is not None:
            raise self.session_error
        return self.session_id


async def wait_for(predicate, *, attempts: int = 200) -> None:
    """Yield to the event loop until ``predicate()`` is true."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")
