"""Tests for backend request/response models."""

import pytest
from pydantic import ValidationError

from seymour.client.models import ChatRequest, ModelGroupInfo, ModelInfo, pick_default_model_key


def group(*models: ModelInfo) -> ModelGroupInfo:
    return ModelGroupInfo(label="All", models=list(models))


class TestChatRequest:
    def test_payload_omits_unset_fields(self):
        request = ChatRequest(message="hi", model_key="claude-sonnet-4")
        assert request.to_payload() == {"message": "hi", "model_key": "claude-sonnet-4"}

    def test_payload_includes_session_and_tool_groups(self):
        request = ChatRequest(message="hi", model_key="m", session_id="s", tool_groups=["core"])
        assert request.to_payload() == {
            "message": "hi",
            "model_key": "m",
            "session_id": "s",
            "tool_groups": ["core"],
        }

    def test_empty_message_rejected(self):
        with pytest.raises(ValidationError):
            ChatRequest(message="", model_key="m")


class TestPickDefaultModelKey:
    """Preference order for the default model."""

    def test_preferred_when_available(self):
        groups = [
            group(ModelInfo(key="gpt-4o", name="GPT"), ModelInfo(key="claude-sonnet-4", name="C"))
        ]
        assert pick_default_model_key(groups) == "claude-sonnet-4"

    def test_first_available_when_preferred_unavailable(self):
        groups = [
            group(
                ModelInfo(key="claude-sonnet-4", name="C", is_available=False),
                ModelInfo(key="gpt-4o", name="GPT"),
            )
        ]
        assert pick_default_model_key(groups) == "gpt-4o"

    def test_preferred_when_nothing_available(self):
        groups = [
            group(
                ModelInfo(key="gpt-4o", name="GPT", is_available=False),
                ModelInfo(key="claude-sonnet-4", name="C", is_available=False),
            )
        ]
        assert pick_default_model_key(groups) == "claude-sonnet-4"

    def test_first_model_as_last_resort(self):
        groups = [group(ModelInfo(key="a", name="A", is_available=False))]
        assert pick_default_model_key(groups) == "a"

    def test_custom_preferred_key(self):
        groups = [group(ModelInfo(key="a", name="A"), ModelInfo(key="b", name="B"))]
        assert pick_default_model_key(groups, preferred_key="b") == "b"

    def test_empty_catalog(self):
        assert pick_default_model_key([]) is None
        assert pick_default_model_key([group()]) is None
