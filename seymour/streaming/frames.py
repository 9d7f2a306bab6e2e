"""Transport frame reader: split a chunked response body into lines.

Chunks may cut a line (or a multi-byte character) anywhere; the partial
tail is carried over to the next chunk and a frame is only emitted once
its terminating newline has been seen. Only data-bearing lines leave this
module: blank separators, ``:`` comments (keep-alives) and other SSE fields
are dropped here.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from seymour.exceptions import TransportError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterable, AsyncIterator

    from seymour.streaming.cancellation import CancellationToken

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"

_CANCELLED = object()
_EXHAUSTED = object()


def is_data_frame(line: str) -> bool:
    """Return True if the line carries a data record."""
    return line.startswith(DATA_PREFIX)


async def iter_frames(
    chunks: AsyncIterable[bytes | str],
    *,
    token: CancellationToken | None = None,
) -> AsyncGenerator[str, None]:
    """Yield complete data frames from a chunked text stream.

    Args:
        chunks: Response body chunks (bytes are decoded as UTF-8).
        token: Optional cancellation token; once it fires the reader stops
            without consuming further chunks.

    Yields:
        Frame strings without their line terminator.

    Raises:
        TransportError: If the byte stream is not valid UTF-8.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
    iterator = aiter(chunks)
    buffer = ""
    frame_count = 0

    while True:
        if token is not None and token.cancelled:
            return

        chunk = await _next_chunk(iterator, token)
        if chunk is _CANCELLED:
            logger.debug("Frame reader stopped by cancellation after %d frames", frame_count)
            return
        if chunk is _EXHAUSTED:
            break

        buffer += _decode(decoder, chunk)
        *lines, buffer = buffer.split("\n")
        for line in lines:
            frame = line.rstrip("\r")
            if not is_data_frame(frame):
                if frame.strip():
                    logger.debug("Dropping non-data line: %s", frame[:100])
                continue
            if token is not None and token.cancelled:
                return
            frame_count += 1
            yield frame

    buffer += _decode(decoder, b"", final=True)
    if buffer.strip():
        logger.debug("Discarding unterminated trailing data (%d chars)", len(buffer))
    logger.debug("Stream closed after %d frames", frame_count)


def _decode(decoder: codecs.IncrementalDecoder, chunk: bytes | str, final: bool = False) -> str:
    if isinstance(chunk, str):
        return chunk
    try:
        return decoder.decode(chunk, final=final)
    except UnicodeDecodeError as e:
        raise TransportError(f"Malformed UTF-8 in response stream: {e}") from e


async def _read(iterator: AsyncIterator[Any]) -> Any:
    try:
        return await anext(iterator)
    except StopAsyncIteration:
        return _EXHAUSTED


async def _next_chunk(iterator: AsyncIterator[Any], token: CancellationToken | None) -> Any:
    """Await the next chunk, giving up early if the token fires."""
    if token is None:
        return await _read(iterator)

    read = asyncio.ensure_future(_read(iterator))
    cancelled = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({read, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        cancelled.cancel()
        if not read.done():
            read.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await read

    if read in done and not read.cancelled():
        return read.result()
    if read.done() and not read.cancelled():
        # Consumed so an error racing the cancellation is not reported as unhandled
        read.exception()
    return _CANCELLED
