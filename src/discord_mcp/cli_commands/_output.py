"""Shared CLI output formatters."""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table

from discord_mcp.protocol.models import ToolDescriptor  # noqa: TC001
from discord_mcp.utils.logging import stderr_console

console = Console()

# ``serve`` owns stdout for protocol traffic; its messages go here.
err_console = stderr_console


def print_tools_table(descriptors: list[ToolDescriptor]) -> None:
    """Pretty-print tool descriptors as a table."""
    table = Table(title="Available Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Arguments")

    for descriptor in descriptors:
        properties = descriptor.input_schema.get("properties", {})
        required = set(descriptor.input_schema.get("required", []))
        args = ", ".join(f"{name}*" if name in required else name for name in properties) or "-"
        table.add_row(descriptor.name, _truncate(descriptor.description), args)

    console.print(table)


def print_tools_json(descriptors: list[ToolDescriptor]) -> None:
    console.print_json(json.dumps([d.to_wire() for d in descriptors]))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
