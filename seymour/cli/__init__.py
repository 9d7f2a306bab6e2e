"""CLI application setup using Typer.

Provides the command-line interface for chatting with the assistant.
"""

from seymour.cli.main import app

__all__ = ["app"]
