"""Transport collaborators for the chat backend."""

from seymour.client.base import ChatTransport
from seymour.client.http import HttpChatTransport
from seymour.client.models import (
    ChatRequest,
    ModelGroupInfo,
    ModelInfo,
    SessionSummary,
    pick_default_model_key,
)

__all__ = [
    "ChatRequest",
    "ChatTransport",
    "HttpChatTransport",
    "ModelGroupInfo",
    "ModelInfo",
    "SessionSummary",
    "pick_default_model_key",
]
