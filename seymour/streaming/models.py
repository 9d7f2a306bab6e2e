"""Data model for one conversational exchange.

Messages, tool-call records, the intermediate event log and the view
segments derived from it. Wire-level events live in
:mod:`seymour.streaming.events`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field


class ExchangeStatus(StrEnum):
    """Lifecycle of one request/response cycle."""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    ERRORED = "errored"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {ExchangeStatus.FINALIZED, ExchangeStatus.ERRORED, ExchangeStatus.CANCELLED}
)


class IntermediateEventKind(StrEnum):
    """Kinds of entries in the intermediate event log."""

    TEXT = "text_response"
    TOOL_CALL_START = "tool_call_start"
    TOOL_CALL_COMPLETE = "tool_call_complete"


class ToolCallRecord(BaseModel):
    """One tool invocation, mutated in place as its events arrive."""

    tool_id: str
    tool_name: str
    arguments: Any = None
    response: Any = None
    success: bool | None = None

    @property
    def is_complete(self) -> bool:
        return self.success is not None


@dataclass(frozen=True)
class IntermediateEvent:
    """An append-only log entry with its creation timestamp.

    Attributes:
        kind: What happened.
        timestamp: When the entry was appended.
        content: Text increment (TEXT entries only).
        tool_id: Tool call the entry refers to (tool entries only).
        tool_name: Tool name, when known.
    """

    kind: IntermediateEventKind
    timestamp: datetime
    content: str | None = None
    tool_id: str | None = None
    tool_name: str | None = None


class Message(BaseModel):
    """One conversational turn.

    ``content`` grows while the assistant streams and is frozen once the
    exchange reaches a terminal state.
    """

    id: str
    role: Literal["user", "assistant"]
    content: str = ""
    tool_calls: list[ToolCallRecord] = Field(default_factory=list)
    intermediate_events: list[IntermediateEvent] = Field(default_factory=list)
    error: str | None = Field(
        default=None,
        description="Explanatory notice shown when the exchange failed in transport",
    )


@dataclass(frozen=True)
class TextSegment:
    """A run of assistant text."""

    text: str
    kind: Literal["text"] = "text"


@dataclass(frozen=True)
class ToolCallSegment:
    """A completed tool call block."""

    tool_call: ToolCallRecord
    kind: Literal["tool_call"] = "tool_call"


ViewSegment = TextSegment | ToolCallSegment


@dataclass(frozen=True)
class ExchangeSnapshot:
    """Immutable view of an exchange handed to listeners."""

    exchange_id: str
    status: ExchangeStatus
    session_id: str | None
    message: Message
    segments: tuple[ViewSegment, ...]
