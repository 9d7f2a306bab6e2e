"""CLI entry point and base commands.

Provides the main CLI application with commands for:
- chat: Chat with the assistant, streaming replies
- models: List models available on the backend
"""

# Configure logging early before other imports
import seymour.logging_config  # noqa: F401

import asyncio

import typer
from rich.table import Table

from seymour.cli.commands.chat import chat
from seymour.cli.utils import console
from seymour.client.http import HttpChatTransport
from seymour.client.models import pick_default_model_key
from seymour.exceptions import SeymourError
from seymour.logging_config import get_logger
from seymour.settings import get_settings

logger = get_logger(__name__)

app = typer.Typer(
    name="seymour",
    help="Streaming chat client for the Seymour civic-data assistant",
    add_completion=False,
    no_args_is_help=True,
)

app.command()(chat)


@app.command()
def models() -> None:
    """List models available on the backend.

    The model that `seymour chat` uses by default is marked with ★.
    """
    asyncio.run(_list_models())


async def _list_models() -> None:
    """Fetch and print the model catalog."""
    settings = get_settings()
    try:
        groups = await HttpChatTransport(settings).list_models()
    except SeymourError as e:
        logger.debug("Model list failed", exc_info=True)
        console.print(f"[red]❌ Failed to load models: {e}[/red]")
        raise typer.Exit(code=1) from None

    if not groups:
        console.print("[yellow]No models available.[/yellow]")
        return

    default_key = pick_default_model_key(groups, settings.default_model_key)

    table = Table(title="Available Models", show_header=True)
    table.add_column("", width=1)
    table.add_column("Group", style="cyan")
    table.add_column("Key")
    table.add_column("Name")
    table.add_column("Provider", style="dim")
    table.add_column("Available", justify="center")

    for group in groups:
        for model in group.models:
            table.add_row(
                "★" if model.key == default_key else "",
                f"{group.emoji} {group.label}".strip(),
                model.key,
                model.name,
                model.provider,
                "✅" if model.is_available else "❌",
            )

    console.print(table)


if __name__ == "__main__":
    app()
