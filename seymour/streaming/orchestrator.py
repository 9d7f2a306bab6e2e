"""Exchange orchestrator: drive one exchange from submission to a terminal state.

A :class:`Conversation` owns the message list and allows at most one
in-flight :class:`Exchange`. Each exchange reads frames, decodes them and
applies them to its own :class:`ExchangeStateStore`, republishing the
composed view after every mutation.

State machine::

    idle -> sending -> streaming -> finalized | errored | cancelled

Listeners are injected callbacks rather than a global event bus:
``on_update`` receives an immutable :class:`ExchangeSnapshot`,
``on_session_change`` the adopted session id and ``on_title`` title
suggestions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING
from uuid import uuid4

from seymour.client.models import ChatRequest
from seymour.exceptions import (
    ExchangeInProgressError,
    ProtocolError,
    TransportError,
    ValidationError,
)
from seymour.streaming.cancellation import CancellationToken
from seymour.streaming.compositor import compose_message
from seymour.streaming.decoder import DecodeFailure, decode_frame
from seymour.streaming.events import (
    EndEvent,
    ErrorEvent,
    SessionIdEvent,
    TitleUpdateEvent,
    TokenEvent,
    ToolCallArgsEvent,
    ToolCallCompleteEvent,
    ToolCallStartEvent,
    UnhandledEvent,
)
from seymour.streaming.frames import iter_frames
from seymour.streaming.models import (
    ExchangeSnapshot,
    ExchangeStatus,
    Message,
    ToolCallSegment,
)
from seymour.streaming.store import ExchangeStateStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from seymour.client.base import ChatTransport
    from seymour.streaming.events import StreamEvent
    from seymour.streaming.models import ViewSegment

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Hello! I'm Seymour, your AI assistant for analyzing civic data. How can I help you today?"
)
DEFAULT_MODEL_KEY = "claude-sonnet-4"


def transport_error_notice(reason: str) -> str:
    """Text shown in place of a reply that broke off in transport."""
    return f"Sorry, I encountered an error: {reason or 'Unknown error'}. Please try again."


def _frozen_segment(segment: ViewSegment) -> ViewSegment:
    # Records are mutated in place by the ledger; snapshots must not follow them
    if isinstance(segment, ToolCallSegment):
        return ToolCallSegment(tool_call=segment.tool_call.model_copy(deep=True))
    return segment


class Exchange:
    """One request/response cycle and the assistant message it builds.

    Attributes:
        id: Exchange identifier.
        status: Current lifecycle state.
        session_id: Session identifier, once known.
        message: The assistant message under construction.
        store: Authoritative streaming state.
        token: Cancellation token scoped to this exchange.
        error: The failure, for errored exchanges.
        segments: Last composed view.
    """

    def __init__(
        self,
        *,
        user_text: str,
        session_id: str | None,
        clock: Callable[[], datetime] | None = None,
        on_change: Callable[[Exchange], None] | None = None,
    ) -> None:
        self.id = uuid4().hex
        self.user_text = user_text
        self.status = ExchangeStatus.IDLE
        self.session_id = session_id
        self.message = Message(id=f"assistant-{self.id}", role="assistant")
        self.store = ExchangeStateStore(clock=clock)
        self.token = CancellationToken()
        self.error: TransportError | ProtocolError | None = None
        self.title: str | None = None
        self.segments: list[ViewSegment] = []
        self._session_from_stream = False
        self._on_change = on_change
        self.token.add_callback(self._on_cancelled)

    @property
    def is_active(self) -> bool:
        return not self.status.is_terminal and self.status is not ExchangeStatus.IDLE

    def cancel(self, reason: str = "cancelled by caller") -> bool:
        """Cancel the exchange. Idempotent; never raises."""
        return self.token.cancel(reason)

    def snapshot(self) -> ExchangeSnapshot:
        return ExchangeSnapshot(
            exchange_id=self.id,
            status=self.status,
            session_id=self.session_id,
            message=self.message.model_copy(deep=True),
            segments=tuple(_frozen_segment(s) for s in self.segments),
        )

    # -- transitions -------------------------------------------------------

    def transition(self, status: ExchangeStatus) -> None:
        logger.debug("Exchange %s: %s -> %s", self.id, self.status, status)
        self.status = status
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    def _on_cancelled(self) -> None:
        if self.status.is_terminal:
            return
        logger.info("Exchange %s cancelled", self.id)
        self.transition(ExchangeStatus.CANCELLED)

    def finalize(self) -> None:
        self._sync_message()
        self.transition(ExchangeStatus.FINALIZED)

    def fail_protocol(self, message: str) -> None:
        self.error = ProtocolError(message)
        self._sync_message()
        # The error text replaces the partial reply; completed tool calls stay
        self.message.content = message
        self.message.intermediate_events = []
        self.segments = compose_message(self.message)
        self.transition(ExchangeStatus.ERRORED)

    def fail_transport(self, error: TransportError) -> None:
        self.error = error
        self._sync_message()
        self.message.error = transport_error_notice(str(error))
        self.segments = compose_message(self.message)
        self.transition(ExchangeStatus.ERRORED)

    # -- event application -------------------------------------------------

    def _sync_message(self) -> None:
        self.message.content = self.store.full_text
        self.message.tool_calls = list(self.store.completed_tool_calls)
        self.message.intermediate_events = list(self.store.event_log)
        self.segments = self.store.compose()

    def apply(self, event: StreamEvent) -> bool:
        """Apply one decoded event.

        Returns:
            False once the event ended the exchange, True otherwise.
        """
        if self.token.cancelled or self.status.is_terminal:
            return False

        if isinstance(event, TokenEvent):
            if self.store.append_token(event.text):
                self._sync_message()
                self._changed()
        elif isinstance(event, ToolCallStartEvent):
            self.store.start_tool_call(event.tool_id, event.tool_name)
            self._sync_message()
            self._changed()
        elif isinstance(event, ToolCallArgsEvent):
            if self.store.set_tool_call_args(event.tool_id, event.arguments):
                self._changed()
        elif isinstance(event, ToolCallCompleteEvent):
            if self.store.complete_tool_call(event.tool_id, event.response, event.success):
                self._sync_message()
                self._changed()
        elif isinstance(event, SessionIdEvent):
            self._adopt_session(event.session_id)
        elif isinstance(event, TitleUpdateEvent):
            logger.info("Session title updated: %s", event.title)
            self.title = event.title
        elif isinstance(event, EndEvent):
            self.finalize()
            return False
        elif isinstance(event, ErrorEvent):
            logger.error("Stream error event: %s", event.message)
            self.fail_protocol(event.message)
            return False
        elif isinstance(event, UnhandledEvent):
            logger.debug("Ignoring unhandled event type %s", event.type)
        return True

    def _adopt_session(self, session_id: str) -> None:
        if session_id == self.session_id:
            self._session_from_stream = True
            return
        if self._session_from_stream:
            logger.warning(
                "Exchange %s: ignoring conflicting session id %s (already %s)",
                self.id,
                session_id,
                self.session_id,
            )
            return
        logger.info("Exchange %s: session id %s -> %s", self.id, self.session_id, session_id)
        self.session_id = session_id
        self._session_from_stream = True
        self._changed()


class Conversation:
    """A conversation context that runs one exchange at a time.

    Args:
        transport: Collaborator that opens response streams and creates sessions.
        session_id: Session to continue, if any.
        model_key: Model requested for every exchange.
        on_update: Called with a snapshot after every state change.
        on_session_change: Called when the conversation adopts a new session id.
        on_title: Called with advisory title suggestions.
        clock: Timestamp source for intermediate events.
    """

    def __init__(
        self,
        transport: ChatTransport,
        *,
        session_id: str | None = None,
        model_key: str = DEFAULT_MODEL_KEY,
        on_update: Callable[[ExchangeSnapshot], None] | None = None,
        on_session_change: Callable[[str], None] | None = None,
        on_title: Callable[[str], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.transport = transport
        self.session_id = session_id
        self.model_key = model_key
        self.on_update = on_update
        self.on_session_change = on_session_change
        self.on_title = on_title
        self._clock = clock
        self.messages: list[Message] = []
        self.active_exchange: Exchange | None = None
        self._reset_messages()

    @property
    def is_streaming(self) -> bool:
        return self.active_exchange is not None and self.active_exchange.is_active

    def _reset_messages(self) -> None:
        self.messages = []
        if self.session_id is None:
            self.messages.append(Message(id="welcome", role="assistant", content=WELCOME_MESSAGE))

    def load_messages(self, messages: list[Message]) -> None:
        """Replace the message list with history loaded elsewhere."""
        if self.is_streaming:
            raise ExchangeInProgressError("Cannot load history while an exchange is streaming")
        self.messages = list(messages) if messages else []
        if not self.messages:
            self._reset_messages()

    def switch_session(self, session_id: str | None) -> None:
        """Cancel any outstanding exchange and move to another session."""
        self.cancel()
        self.active_exchange = None
        self.session_id = session_id
        self._reset_messages()

    def cancel(self) -> bool:
        """Cancel the in-flight exchange, if any."""
        if self.active_exchange is None:
            return False
        return self.active_exchange.cancel()

    async def send(self, text: str, *, tool_groups: list[str] | None = None) -> Exchange:
        """Run one exchange to a terminal state.

        Transport and protocol failures end the exchange as ``errored`` and
        are reported on it rather than raised.

        Raises:
            ValidationError: If ``text`` is empty.
            ExchangeInProgressError: If another exchange is still streaming.
        """
        text = text.strip()
        if not text:
            raise ValidationError("Message must not be empty")
        if self.is_streaming:
            raise ExchangeInProgressError(
                "An exchange is already in progress",
                exchange_id=self.active_exchange.id if self.active_exchange else None,
            )

        exchange = Exchange(
            user_text=text,
            session_id=self.session_id,
            clock=self._clock,
            on_change=self._exchange_changed,
        )
        self.active_exchange = exchange
        self.messages.append(Message(id=f"user-{exchange.id}", role="user", content=text))
        # Placeholder so "no content yet" is visible before the first token
        self.messages.append(exchange.message)
        exchange.transition(ExchangeStatus.SENDING)

        try:
            await self._resolve_session(exchange)
            if not exchange.token.cancelled:
                await self._stream(exchange, tool_groups)
        except TransportError as e:
            if not exchange.status.is_terminal:
                logger.error("Exchange %s transport failure: %s", exchange.id, e)
                exchange.fail_transport(e)
        except asyncio.CancelledError:
            exchange.cancel("exchange task cancelled")
            raise
        except Exception as e:
            if not exchange.status.is_terminal:
                exchange.fail_transport(TransportError(f"Unexpected streaming error: {e}"))
            raise

        if not exchange.status.is_terminal:
            # Clean close, with or without an end event
            exchange.finalize()

        if exchange.title and self.on_title is not None:
            self._notify(self.on_title, exchange.title)
        return exchange

    async def _resolve_session(self, exchange: Exchange) -> None:
        if exchange.session_id is not None:
            return
        try:
            session_id = await self.transport.create_session(self.model_key)
        except TransportError as e:
            # The backend assigns one and reports it via a session_id event
            logger.warning("Failed to create session, continuing without one: %s", e)
            return
        if exchange.token.cancelled or exchange is not self.active_exchange:
            logger.debug("Discarding session %s created for a stale exchange", session_id)
            return
        exchange.session_id = session_id
        self._adopt_session(session_id)

    async def _stream(self, exchange: Exchange, tool_groups: list[str] | None) -> None:
        request = ChatRequest(
            message=exchange.user_text,
            session_id=exchange.session_id,
            model_key=self.model_key,
            tool_groups=tool_groups,
        )
        async with self.transport.open_stream(request) as chunks:
            async for frame in iter_frames(chunks, token=exchange.token):
                if exchange.token.cancelled:
                    break
                if exchange.status is ExchangeStatus.SENDING:
                    exchange.transition(ExchangeStatus.STREAMING)

                event = decode_frame(frame)
                if isinstance(event, DecodeFailure):
                    continue
                if not exchange.apply(event):
                    break

    # -- notifications -----------------------------------------------------

    def _exchange_changed(self, exchange: Exchange) -> None:
        if exchange is not self.active_exchange:
            return
        if exchange.session_id is not None and exchange.session_id != self.session_id:
            self._adopt_session(exchange.session_id)
        if self.on_update is not None:
            self._notify(self.on_update, exchange.snapshot())

    def _adopt_session(self, session_id: str) -> None:
        if session_id == self.session_id:
            return
        self.session_id = session_id
        if self.on_session_change is not None:
            self._notify(self.on_session_change, session_id)

    @staticmethod
    def _notify(callback: Callable[..., None], *args: object) -> None:
        try:
            callback(*args)
        except Exception:
            logger.exception("Conversation listener failed")

