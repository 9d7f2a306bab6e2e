"""Request and response models for the chat backend."""

from __future__ import annotations

from pydantic import BaseModel, Field

PREFERRED_DEFAULT_MODEL_KEY = "claude-sonnet-4"


class ChatRequest(BaseModel):
    """The single outbound request that opens an exchange stream."""

    message: str = Field(..., min_length=1)
    session_id: str | None = None
    model_key: str
    tool_groups: list[str] | None = None

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class SessionSummary(BaseModel):
    """Session metadata returned when a session is created."""

    session_id: str
    title: str = ""
    model_key: str | None = None
    message_count: int = 0
    is_active: bool = True


class ModelInfo(BaseModel):
    key: str
    name: str
    provider: str = ""
    context_window: int = 0
    input_price: float = 0.0
    output_price: float = 0.0
    is_available: bool = True


class ModelGroupInfo(BaseModel):
    label: str
    emoji: str = ""
    models: list[ModelInfo] = Field(default_factory=list)


def pick_default_model_key(
    groups: list[ModelGroupInfo],
    preferred_key: str = PREFERRED_DEFAULT_MODEL_KEY,
) -> str | None:
    """Pick a sensible default model key.

    Preference order:
    1) preferred model key (if available)
    2) any available model
    3) preferred model key (even if unavailable)
    4) first model in list
    """
    all_models = [model for group in groups for model in group.models]

    for model in all_models:
        if model.key == preferred_key and model.is_available:
            return model.key
    for model in all_models:
        if model.is_available:
            return model.key
    for model in all_models:
        if model.key == preferred_key:
            return model.key
    return all_models[0].key if all_models else None
