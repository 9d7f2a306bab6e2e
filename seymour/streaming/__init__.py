"""Streaming module: decomposed components for one assistant exchange.

Provides modular, independently testable components: frame reading, event
decoding, the per-exchange state store and tool-call ledger, chronological
view composition, cancellation and the orchestrator that ties them together.
"""

from seymour.streaming.cancellation import CancellationToken
from seymour.streaming.compositor import compose, compose_message
from seymour.streaming.decoder import DecodeFailure, decode_frame
from seymour.streaming.events import StreamEvent
from seymour.streaming.frames import iter_frames
from seymour.streaming.ledger import ToolCallLedger
from seymour.streaming.models import (
    ExchangeSnapshot,
    ExchangeStatus,
    IntermediateEvent,
    IntermediateEventKind,
    Message,
    TextSegment,
    ToolCallRecord,
    ToolCallSegment,
    ViewSegment,
)
from seymour.streaming.orchestrator import Conversation, Exchange
from seymour.streaming.store import ExchangeStateStore

__all__ = [
    "CancellationToken",
    "Conversation",
    "DecodeFailure",
    "Exchange",
    "ExchangeSnapshot",
    "ExchangeStateStore",
    "ExchangeStatus",
    "IntermediateEvent",
    "IntermediateEventKind",
    "Message",
    "StreamEvent",
    "TextSegment",
    "ToolCallLedger",
    "ToolCallRecord",
    "ToolCallSegment",
    "ViewSegment",
    "compose",
    "compose_message",
    "decode_frame",
    "iter_frames",
]
