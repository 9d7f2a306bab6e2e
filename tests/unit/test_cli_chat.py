"""Unit tests for CLI chat command."""

import asyncio
import os
import signal
import sys
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from seymour.cli.main import app
from seymour.exceptions import ConfigurationError, TransportError
from tests.helpers.settings import make_test_settings
from tests.helpers.streaming import FakeTransport, sse_stream


@pytest.fixture
def runner():
    """CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_transport():
    return FakeTransport(
        sse_stream(
            {"type": "session_id", "content": "sess-1"},
            {"type": "tool_call_start", "tool_id": "t1", "tool_name": "count_permits"},
            {"type": "tool_call_complete", "tool_id": "t1", "response": {"count": 12}},
            {"type": "token", "content": "There were 12 permits."},
            {"type": "end"},
        )
    )


def patched(transport):
    """Patch the chat command's settings and transport."""
    return (
        patch("seymour.cli.commands.chat.get_settings", return_value=make_test_settings()),
        patch("seymour.cli.commands.chat.HttpChatTransport", return_value=transport),
    )


class TestChat:
    """Test chat command."""

    def test_chat_with_message(self, runner, fake_transport):
        """A single message streams one reply and exits cleanly."""
        settings_patch, transport_patch = patched(fake_transport)
        with settings_patch, transport_patch:
            result = runner.invoke(app, ["chat", "How many permits?"])

        assert result.exit_code == 0, result.output
        assert "How many permits?" in result.output
        assert "There were 12 permits." in result.output
        assert "count_permits" in result.output
        assert fake_transport.requests[0].message == "How many permits?"

    def test_chat_continue_session(self, runner, fake_transport):
        settings_patch, transport_patch = patched(fake_transport)
        with settings_patch, transport_patch:
            result = runner.invoke(app, ["chat", "hi", "--session", "sess-1", "-m", "gpt-4o"])

        assert result.exit_code == 0, result.output
        assert fake_transport.session_requests == []
        [request] = fake_transport.requests
        assert request.session_id == "sess-1"
        assert request.model_key == "gpt-4o"

    def test_chat_uses_default_model(self, runner, fake_transport):
        settings_patch, transport_patch = patched(fake_transport)
        with settings_patch, transport_patch:
            runner.invoke(app, ["chat", "hi"])

        assert fake_transport.session_requests == ["claude-sonnet-4"]

    def test_chat_stream_failure_exits_nonzero(self, runner):
        transport = FakeTransport(open_error=TransportError("HTTP 502", status_code=502))
        settings_patch, transport_patch = patched(transport)
        with settings_patch, transport_patch:
            result = runner.invoke(app, ["chat", "hi"])

        assert result.exit_code == 1
        assert "Sorry, I encountered an error: HTTP 502" in result.output

    def test_chat_configuration_error(self, runner):
        with (
            patch("seymour.cli.commands.chat.get_settings", return_value=make_test_settings()),
            patch(
                "seymour.cli.commands.chat.HttpChatTransport",
                side_effect=ConfigurationError("api_base_url is not configured"),
            ),
        ):
            result = runner.invoke(app, ["chat", "hi"])

        assert result.exit_code == 1
        assert "api_base_url is not configured" in result.output

    def test_interactive_mode(self, runner, fake_transport):
        settings_patch, transport_patch = patched(fake_transport)
        with settings_patch, transport_patch:
            result = runner.invoke(app, ["chat"], input="How many permits?\nexit\n")

        assert result.exit_code == 0, result.output
        assert "Hello! I'm Seymour" in result.output
        assert "There were 12 permits." in result.output
        assert "Chat session ended" in result.output

    def test_interactive_new_session(self, runner, fake_transport):
        settings_patch, transport_patch = patched(fake_transport)
        with settings_patch, transport_patch:
            result = runner.invoke(app, ["chat", "-s", "old"], input="new\nhi\nquit\n")

        assert result.exit_code == 0, result.output
        assert "Started a new session" in result.output
        assert fake_transport.requests[0].session_id == "session-new"

    def test_interactive_ends_on_eof(self, runner, fake_transport):
        settings_patch, transport_patch = patched(fake_transport)
        with settings_patch, transport_patch:
            result = runner.invoke(app, ["chat"], input="")

        assert result.exit_code == 0
        assert fake_transport.requests == []


class TestReplyInterrupt:
    """Ctrl-C while a reply streams."""

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signal delivery")
    async def test_sigint_cancels_only_the_reply(self):
        from seymour.cli.commands.chat import _run_exchange
        from seymour.streaming.models import ExchangeStatus
        from seymour.streaming.orchestrator import Conversation

        transport = FakeTransport(sse_stream({"type": "token", "content": "Half"}), hang=True)
        conversation = Conversation(transport, session_id="sess-1")
        task = asyncio.create_task(_run_exchange(conversation, "hi"))
        await asyncio.wait_for(transport.opened.wait(), timeout=1.0)

        os.kill(os.getpid(), signal.SIGINT)
        exchange = await asyncio.wait_for(task, timeout=1.0)

        assert exchange.status is ExchangeStatus.CANCELLED
        assert transport.closed is True
        # The interactive loop can keep going with the same conversation
        assert not conversation.is_streaming


class TestModels:
    """Test models command."""

    def test_lists_models_and_marks_default(self, runner):
        from unittest.mock import AsyncMock, MagicMock

        from seymour.client.models import ModelGroupInfo, ModelInfo

        transport = MagicMock()
        transport.list_models = AsyncMock(
            return_value=[
                ModelGroupInfo(
                    label="Anthropic",
                    models=[
                        ModelInfo(key="claude-sonnet-4", name="Claude Sonnet 4"),
                        ModelInfo(key="claude-haiku", name="Claude Haiku", is_available=False),
                    ],
                )
            ]
        )

        with (
            patch("seymour.cli.main.get_settings", return_value=make_test_settings()),
            patch("seymour.cli.main.HttpChatTransport", return_value=transport),
        ):
            result = runner.invoke(app, ["models"])

        assert result.exit_code == 0, result.output
        assert "claude-sonnet-4" in result.output
        assert "claude-haiku" in result.output
        assert "★" in result.output

    def test_empty_catalog(self, runner):
        from unittest.mock import AsyncMock, MagicMock

        transport = MagicMock()
        transport.list_models = AsyncMock(return_value=[])

        with (
            patch("seymour.cli.main.get_settings", return_value=make_test_settings()),
            patch("seymour.cli.main.HttpChatTransport", return_value=transport),
        ):
            result = runner.invoke(app, ["models"])

        assert result.exit_code == 0
        assert "No models available" in result.output

    def test_failure_exits_nonzero(self, runner):
        from unittest.mock import AsyncMock, MagicMock

        transport = MagicMock()
        transport.list_models = AsyncMock(side_effect=TransportError("HTTP 500", status_code=500))

        with (
            patch("seymour.cli.main.get_settings", return_value=make_test_settings()),
            patch("seymour.cli.main.HttpChatTransport", return_value=transport),
        ):
            result = runner.invoke(app, ["models"])

        assert result.exit_code == 1
        assert "Failed to load models" in result.output
