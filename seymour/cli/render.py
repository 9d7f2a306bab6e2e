"""Rich renderables for composed exchange views."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from seymour.streaming.models import TextSegment

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import RenderableType

    from seymour.streaming.models import ToolCallRecord, ViewSegment

_MAX_PAYLOAD_CHARS = 2000


def format_payload(value: Any) -> str:
    """Format tool arguments or responses for display.

    Strings are shown verbatim; anything else as indented JSON, falling
    back to ``str()`` for values JSON cannot represent.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def _truncate(text: str) -> str:
    if len(text) <= _MAX_PAYLOAD_CHARS:
        return text
    return text[:_MAX_PAYLOAD_CHARS] + f"\n… ({len(text) - _MAX_PAYLOAD_CHARS} more characters)"


def render_tool_call(record: ToolCallRecord) -> Panel:
    """Render a completed tool call as a panel."""
    success = record.success is not False
    parts: list[RenderableType] = []
    arguments = format_payload(record.arguments)
    if arguments:
        parts.append(Text("Arguments", style="bold"))
        parts.append(Text(_truncate(arguments)))
    response = format_payload(record.response)
    if response:
        parts.append(Text("Response", style="bold"))
        parts.append(Text(_truncate(response)))
    if not parts:
        parts.append(Text("(no details)", style="dim"))

    return Panel(
        Group(*parts),
        title=f"🔧 {record.tool_name}",
        subtitle="✅ Success" if success else "❌ Failed",
        border_style="green" if success else "red",
    )


def render_segments(segments: Sequence[ViewSegment]) -> Group:
    """Render view segments in order; an empty view shows a thinking hint."""
    if not segments:
        return Group(Text("Seymour is thinking...", style="dim"))
    return Group(
        *(
            Markdown(segment.text)
            if isinstance(segment, TextSegment)
            else render_tool_call(segment.tool_call)
            for segment in segments
        )
    )
