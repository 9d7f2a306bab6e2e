"""Exchange state store: authoritative mutable state for one exchange.

All mutation of an in-flight exchange goes through one store object that
the orchestrator owns, so callbacks always see the latest accumulated
values rather than a stale copy.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from seymour.streaming.compositor import compose
from seymour.streaming.ledger import ToolCallLedger
from seymour.streaming.models import IntermediateEvent, IntermediateEventKind

if TYPE_CHECKING:
    from collections.abc import Callable

    from seymour.streaming.models import ToolCallRecord, ViewSegment

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ExchangeStateStore:
    """Accumulated text, tool-call ledger and intermediate event log.

    Mutations are synchronous and single-threaded: exactly one orchestrator
    drives one store, so no locking is needed.

    Args:
        clock: Timestamp source for log entries (defaults to UTC now).
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self.full_text = ""
        self.ledger = ToolCallLedger()
        self._event_log: list[IntermediateEvent] = []
        self._clock = clock or _utcnow

    @property
    def event_log(self) -> tuple[IntermediateEvent, ...]:
        return tuple(self._event_log)

    @property
    def completed_tool_calls(self) -> tuple[ToolCallRecord, ...]:
        return self.ledger.completed

    def append_token(self, text: str) -> bool:
        """Append a text increment. Empty increments are ignored."""
        if not text:
            return False
        self.full_text += text
        self._log(IntermediateEventKind.TEXT, content=text)
        return True

    def start_tool_call(self, tool_id: str, tool_name: str) -> ToolCallRecord:
        record = self.ledger.start(tool_id, tool_name)
        self._log(IntermediateEventKind.TOOL_CALL_START, tool_id=tool_id, tool_name=tool_name)
        return record

    def set_tool_call_args(self, tool_id: str, arguments: Any) -> bool:
        """Attach arguments to a started tool call; no-op for unknown ids."""
        return self.ledger.set_arguments(tool_id, arguments) is not None

    def complete_tool_call(self, tool_id: str, response: Any, success: bool) -> bool:
        """Record a tool call outcome; no-op for unknown ids."""
        record = self.ledger.complete(tool_id, response, success)
        if record is None:
            return False
        self._log(
            IntermediateEventKind.TOOL_CALL_COMPLETE,
            tool_id=tool_id,
            tool_name=record.tool_name,
        )
        return True

    def compose(self) -> list[ViewSegment]:
        """Chronological view of the current state."""
        return compose(self._event_log, self.ledger.completed, full_text=self.full_text)

    def _log(self, kind: IntermediateEventKind, **fields: Any) -> None:
        timestamp = self._clock()
        # Clamp so a wall-clock step backwards cannot reorder the log when sorted
        if self._event_log and timestamp < self._event_log[-1].timestamp:
            timestamp = self._event_log[-1].timestamp
        self._event_log.append(IntermediateEvent(kind=kind, timestamp=timestamp, **fields))
