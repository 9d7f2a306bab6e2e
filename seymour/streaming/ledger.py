"""Tool-call ledger: keyed registry of tool invocations for one exchange."""

from __future__ import annotations

import logging
from typing import Any

from seymour.streaming.models import ToolCallRecord

logger = logging.getLogger(__name__)


class ToolCallLedger:
    """Tracks each tool call from start through arguments to completion.

    Records are mutated in place and never removed. A record joins
    ``completed`` exactly once, when its completion arrives.
    """

    def __init__(self) -> None:
        self._records: dict[str, ToolCallRecord] = {}
        self._completed: list[ToolCallRecord] = []

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, tool_id: str) -> ToolCallRecord | None:
        return self._records.get(tool_id)

    @property
    def completed(self) -> tuple[ToolCallRecord, ...]:
        """Completed records in completion order."""
        return tuple(self._completed)

    @property
    def pending(self) -> tuple[ToolCallRecord, ...]:
        """Started records that have not completed yet."""
        return tuple(r for r in self._records.values() if not r.is_complete)

    def start(self, tool_id: str, tool_name: str) -> ToolCallRecord:
        """Register a new tool call.

        A repeated ``tool_id`` replaces the earlier record (last start wins);
        a record that already completed stays in ``completed``.
        """
        if tool_id in self._records:
            logger.warning(
                "Tool call %s restarted as '%s'; replacing the earlier record",
                tool_id,
                tool_name,
            )
        record = ToolCallRecord(tool_id=tool_id, tool_name=tool_name)
        self._records[tool_id] = record
        return record

    def set_arguments(self, tool_id: str, arguments: Any) -> ToolCallRecord | None:
        record = self._records.get(tool_id)
        if record is None:
            logger.debug("Arguments for unknown tool call %s ignored", tool_id)
            return None
        record.arguments = arguments
        return record

    def complete(self, tool_id: str, response: Any, success: bool) -> ToolCallRecord | None:
        """Fill in the outcome and move the record to ``completed``.

        Returns:
            The completed record, or None if ``tool_id`` was never started.
        """
        record = self._records.get(tool_id)
        if record is None:
            logger.warning("Completion for unknown tool call %s ignored", tool_id)
            return None
        already_complete = record.is_complete
        record.response = response
        record.success = success
        if already_complete:
            logger.warning("Tool call %s completed twice; keeping the latest outcome", tool_id)
        else:
            self._completed.append(record)
        return record
