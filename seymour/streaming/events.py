"""Stream event types for the exchange pipeline.

Each wire ``type`` maps to one model. Field aliases absorb the different
key names the backend has used over time, so downstream code only ever
sees the canonical shape.
"""

from __future__ import annotations

from typing import Any, Literal
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class SessionIdEvent(_Event):
    """Authoritative session identifier for this exchange."""

    type: Literal["session_id"] = "session_id"
    session_id: str = Field(validation_alias=AliasChoices("content", "session_id"), min_length=1)


class TokenEvent(_Event):
    """One increment of assistant text."""

    type: Literal["token"] = "token"
    text: str = Field(default="", validation_alias=AliasChoices("content", "text"))

    @field_validator("text", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value


class ToolCallStartEvent(_Event):
    type: Literal["tool_call_start"] = "tool_call_start"
    tool_id: str = Field(default_factory=lambda: f"tool-{uuid4().hex[:12]}")
    tool_name: str = Field(default="unknown", validation_alias=AliasChoices("tool_name", "toolName"))

    @field_validator("tool_id", mode="before")
    @classmethod
    def _missing_tool_id(cls, value: Any) -> Any:
        return value or f"tool-{uuid4().hex[:12]}"

    @field_validator("tool_name", mode="before")
    @classmethod
    def _missing_tool_name(cls, value: Any) -> Any:
        return value or "unknown"


class ToolCallArgsEvent(_Event):
    type: Literal["tool_call_args"] = "tool_call_args"
    tool_id: str
    arguments: Any = Field(
        default=None,
        validation_alias=AliasChoices("arguments", "args", "input", "parameters"),
    )


class ToolCallCompleteEvent(_Event):
    type: Literal["tool_call_complete"] = "tool_call_complete"
    tool_id: str
    response: Any = Field(
        default=None,
        validation_alias=AliasChoices("response", "result", "output"),
    )
    success: bool = True

    @field_validator("success", mode="before")
    @classmethod
    def _absent_success(cls, value: Any) -> Any:
        # Only an explicit false marks a failed call
        return True if value is None else value


class TitleUpdateEvent(_Event):
    """Advisory title suggestion for the session."""

    type: Literal["title_update"] = "title_update"
    title: str


class EndEvent(_Event):
    type: Literal["end"] = "end"


class ErrorEvent(_Event):
    """Fatal exchange-level error reported by the backend."""

    type: Literal["error"] = "error"
    message: str = Field(
        default="Stream error occurred",
        validation_alias=AliasChoices("content", "message"),
    )

    @field_validator("message", mode="before")
    @classmethod
    def _blank_message(cls, value: Any) -> Any:
        # A null or empty error is still fatal
        if value is None or value == "":
            return "Stream error occurred"
        return value if isinstance(value, str) else str(value)


class UnhandledEvent(_Event):
    """An event of a type this client does not know yet.

    Kept so newer backends can add event kinds without breaking older
    clients; the orchestrator logs and ignores it.
    """

    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


StreamEvent = (
    SessionIdEvent
    | TokenEvent
    | ToolCallStartEvent
    | ToolCallArgsEvent
    | ToolCallCompleteEvent
    | TitleUpdateEvent
    | EndEvent
    | ErrorEvent
    | UnhandledEvent
)

EVENT_TYPES: dict[str, type[_Event]] = {
    "session_id": SessionIdEvent,
    "token": TokenEvent,
    "tool_call_start": ToolCallStartEvent,
    "tool_call_args": ToolCallArgsEvent,
    "tool_call_complete": ToolCallCompleteEvent,
    "title_update": TitleUpdateEvent,
    "end": EndEvent,
    "error": ErrorEvent,
}
