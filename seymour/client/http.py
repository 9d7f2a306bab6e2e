"""HTTP transport for the chat backend.

Streams ``POST /api/chat/message/stream`` responses as raw byte chunks
and wraps every httpx failure in :class:`TransportError`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx
import pydantic

from seymour.client.models import ModelGroupInfo, SessionSummary
from seymour.exceptions import ConfigurationError, TransportError
from seymour.settings import get_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator

    from seymour.client.models import ChatRequest
    from seymour.settings import Settings

logger = logging.getLogger(__name__)


class HttpChatTransport:
    """Talks to the chat backend over HTTP.

    Usage::

        transport = HttpChatTransport()  # configured from settings
        async with transport.open_stream(request) as chunks:
            async for frame in iter_frames(chunks, token=token):
                ...

    Args:
        settings: Settings to use (defaults to ``get_settings()``).
        http_transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
    """

    _ALLOWED_SCHEMES = {"http", "https"}

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        base_url = self.settings.api_base_url.strip()
        if not base_url:
            raise ConfigurationError("api_base_url is not configured")
        scheme = httpx.URL(base_url).scheme
        if scheme not in self._ALLOWED_SCHEMES:
            raise ConfigurationError(
                f"Invalid URL scheme '{scheme}'. Only {sorted(self._ALLOWED_SCHEMES)} allowed."
            )
        self.base_url = base_url.rstrip("/")
        self._http_transport = http_transport

    def _headers(self, *, accept: str = "application/json") -> dict[str, str]:
        headers = {"Accept": accept}
        token = self.settings.api_token.get_secret_value()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _client(self, timeout: httpx.Timeout) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=self._http_transport,
        )

    @asynccontextmanager
    async def open_stream(self, request: ChatRequest) -> AsyncGenerator[AsyncIterator[bytes], None]:
        """Open the response stream for one exchange.

        Yields:
            The response body as byte chunks.

        Raises:
            TransportError: On non-2xx status, connection failure or timeout,
                whether at open time or mid-stream.
        """
        timeout = httpx.Timeout(
            self.settings.stream_timeout_seconds,
            connect=self.settings.connect_timeout_seconds,
        )
        logger.debug("Opening stream for session %s", request.session_id or "(new)")
        try:
            async with self._client(timeout) as client:
                async with client.stream(
                    "POST",
                    self.settings.stream_path,
                    json=request.to_payload(),
                    headers=self._headers(accept="text/event-stream"),
                ) as response:
                    if response.is_error:
                        body = (await response.aread()).decode("utf-8", errors="replace")
                        raise TransportError(
                            f"Stream request failed: {response.status_code} {body[:200]}".rstrip(),
                            status_code=response.status_code,
                        )
                    yield response.aiter_bytes()
        except httpx.TimeoutException as e:
            raise TransportError(f"Stream timeout: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Stream connection failed: {e}") from e

    async def create_session(self, model_key: str, tool_groups: list[str] | None = None) -> str:
        """Create a new session and return its identifier."""
        params: list[tuple[str, str]] = [("model_key", model_key)]
        params.extend(("tool_groups", group) for group in tool_groups or [])
        body = await self._request_json("POST", self.settings.new_session_path, params=params)
        try:
            return SessionSummary.model_validate(body).session_id
        except pydantic.ValidationError as e:
            raise TransportError(f"Invalid session response: {e.error_count()} error(s)") from e

    async def list_models(self) -> list[ModelGroupInfo]:
        """Fetch the model catalog grouped by provider."""
        body = await self._request_json("GET", self.settings.models_path)
        if not isinstance(body, list):
            raise TransportError("Invalid model list response: expected a JSON array")
        try:
            return [ModelGroupInfo.model_validate(group) for group in body]
        except pydantic.ValidationError as e:
            raise TransportError(f"Invalid model list response: {e.error_count()} error(s)") from e

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            async with self._client(httpx.Timeout(self.settings.request_timeout_seconds)) as client:
                resp = await client.request(method, path, headers=self._headers(), **kwargs)
                resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP {e.response.status_code}: {method} {path}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Timeout after {self.settings.request_timeout_seconds}s: {e}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"Invalid JSON response: {e}") from e
