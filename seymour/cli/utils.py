"""Shared CLI objects."""

from rich.console import Console

console = Console()
