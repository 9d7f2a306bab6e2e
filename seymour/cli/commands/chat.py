"""Chat commands."""

import asyncio
import contextlib
import signal
from typing import Annotated

import typer
from rich.live import Live
from rich.panel import Panel
from rich.prompt import Prompt

from seymour.cli.render import render_segments
from seymour.cli.utils import console
from seymour.client.http import HttpChatTransport
from seymour.exceptions import SeymourError
from seymour.settings import get_settings
from seymour.streaming.compositor import compose_message
from seymour.streaming.models import ExchangeStatus
from seymour.streaming.orchestrator import Conversation, Exchange


def chat(
    message: Annotated[
        str | None,
        typer.Argument(help="Message to send (or leave empty for interactive mode)"),
    ] = None,
    session_id: Annotated[
        str | None,
        typer.Option("--session", "-s", help="Continue an existing session"),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model key (defaults to DEFAULT_MODEL_KEY)"),
    ] = None,
) -> None:
    """Chat with the Seymour assistant.

    Replies stream in as they are generated, with tool calls shown where
    they happened. Press Ctrl-C to stop a reply; at the prompt it ends
    the chat.

    Examples:
        seymour chat "How many permits were issued last year?"
        seymour chat --session <session-id>
        seymour chat  # Interactive mode
    """
    try:
        exchange = asyncio.run(_chat_interactive(message, session_id, model))
    except KeyboardInterrupt:
        console.print("\n[dim]Stream cancelled.[/dim]")
        raise typer.Exit(code=130) from None
    except SeymourError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from None

    if exchange is not None and exchange.status is ExchangeStatus.ERRORED:
        raise typer.Exit(code=1)


async def _chat_interactive(
    initial_message: str | None,
    session_id: str | None,
    model_key: str | None,
) -> Exchange | None:
    """Run a single exchange, or the interactive loop when no message is given."""
    settings = get_settings()
    conversation = Conversation(
        HttpChatTransport(settings),
        session_id=session_id,
        model_key=model_key or settings.default_model_key,
        on_session_change=lambda sid: console.print(f"[dim]Session: {sid}[/dim]"),
        on_title=lambda title: console.print(f"[dim]Title: {title}[/dim]"),
    )

    if initial_message:
        console.print(f"[bold cyan]You:[/bold cyan] {initial_message}\n")
        return await _run_exchange(conversation, initial_message)

    console.print(
        Panel(
            "[bold blue]Seymour Chat[/bold blue]\n\n"
            "Ask questions about civic data.\n"
            "Type [cyan]'new'[/cyan] to start a new session.\n"
            "Type [cyan]'exit'[/cyan] or [cyan]'quit'[/cyan] to end.",
            title="💬 Seymour",
            border_style="blue",
        )
    )
    for existing in conversation.messages:
        console.print("[bold green]Seymour:[/bold green]")
        console.print(render_segments(compose_message(existing)))

    while True:
        try:
            user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
        except (KeyboardInterrupt, EOFError):
            break

        if not user_input.strip():
            continue
        if user_input.lower() in ("exit", "quit", "q"):
            console.print("[dim]Ending conversation.[/dim]")
            break
        if user_input.lower() == "new":
            conversation.switch_session(None)
            console.print("[dim]Started a new session.[/dim]")
            continue

        console.print()
        await _run_exchange(conversation, user_input)

    console.print("\n[dim]Chat session ended.[/dim]")
    return None


async def _run_exchange(conversation: Conversation, text: str) -> Exchange:
    """Send one message, re-rendering the reply as it streams."""
    console.print("[bold green]Seymour:[/bold green]")
    loop = asyncio.get_running_loop()
    # Ctrl-C while a reply streams cancels that reply only
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, conversation.cancel)
    try:
        with Live(render_segments([]), console=console, refresh_per_second=12) as live:
            conversation.on_update = lambda snapshot: live.update(
                render_segments(snapshot.segments)
            )
            try:
                exchange = await conversation.send(text)
            finally:
                conversation.on_update = None
            live.update(render_segments(exchange.segments))
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)

    if exchange.status is ExchangeStatus.CANCELLED:
        console.print("[dim]Stream cancelled.[/dim]")
    return exchange
