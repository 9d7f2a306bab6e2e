"""Chronological view compositor.

Rebuilds the order in which text and tool calls actually happened from the
intermediate event log. Pure: the same inputs always give the same segments
and nothing passed in is mutated.
"""

from __future__ import annotations

from operator import attrgetter
from typing import TYPE_CHECKING

from seymour.streaming.models import (
    IntermediateEventKind,
    TextSegment,
    ToolCallSegment,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from seymour.streaming.models import (
        IntermediateEvent,
        Message,
        ToolCallRecord,
        ViewSegment,
    )


def compose(
    event_log: Sequence[IntermediateEvent],
    completed_tool_calls: Iterable[ToolCallRecord],
    *,
    full_text: str | None = None,
) -> list[ViewSegment]:
    """Derive ordered view segments from the event log and completed tool calls.

    Consecutive text increments merge into one segment; a tool-call start
    closes the current text run and places that call's block. Calls that
    never completed are omitted. Text in ``full_text`` that no log entry
    accounts for is appended at the end.

    With an empty log (e.g. a message loaded from history) the completed
    tool calls come first, followed by ``full_text``.

    Args:
        event_log: Intermediate events in arrival order.
        completed_tool_calls: Completed tool-call records.
        full_text: The message's accumulated text, if known.

    Returns:
        Text and tool-call segments in chronological order.
    """
    completed = list(completed_tool_calls)

    if not event_log:
        segments: list[ViewSegment] = [ToolCallSegment(tool_call=tc) for tc in completed]
        if full_text and full_text.strip():
            segments.append(TextSegment(text=full_text))
        return segments

    by_id = {tc.tool_id: tc for tc in completed}
    ordered = sorted(event_log, key=attrgetter("timestamp"))  # stable

    segments = []
    pending: list[str] = []
    placed: set[str] = set()

    for entry in ordered:
        if entry.kind is IntermediateEventKind.TEXT:
            pending.append(entry.content or "")
        elif entry.kind is IntermediateEventKind.TOOL_CALL_START:
            _flush_text(segments, pending)
            record = by_id.get(entry.tool_id or "")
            if record is not None and record.tool_id not in placed:
                placed.add(record.tool_id)
                segments.append(ToolCallSegment(tool_call=record))
    _flush_text(segments, pending)

    if full_text:
        represented = "".join(
            e.content or "" for e in event_log if e.kind is IntermediateEventKind.TEXT
        )
        if full_text.strip() != represented.strip():
            extra = full_text[len(represented) :] if full_text.startswith(represented) else full_text
            if extra.strip():
                segments.append(TextSegment(text=extra))

    return segments


def compose_message(message: Message) -> list[ViewSegment]:
    """Compose the view of a message, including its failure notice if any."""
    segments = compose(message.intermediate_events, message.tool_calls, full_text=message.content)
    if message.error:
        segments.append(TextSegment(text=message.error))
    return segments


def _flush_text(segments: list[ViewSegment], pending: list[str]) -> None:
    text = "".join(pending)
    pending.clear()
    if text.strip():
        segments.append(TextSegment(text=text))
