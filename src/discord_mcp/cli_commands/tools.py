"""``discord-mcp tools``: inspect the tools the server would expose."""

from __future__ import annotations

from pathlib import Path

import click

from discord_mcp.cli_commands._output import console, print_tools_json, print_tools_table


@click.group()
def tools() -> None:
    """Inspect available tools."""


@tools.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print descriptors as JSON.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file (for disabled_tools).",
)
def list_tools(as_json: bool, config_path: Path | None) -> None:
    """List every tool discovery finds, in tools/list order.

    No Discord connection is made.
    """
    from discord_mcp.config import ConfigError, load_settings
    from discord_mcp.server import build_registry

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise SystemExit(1) from exc

    descriptors = build_registry(settings).list()

    if as_json:
        print_tools_json(descriptors)
        return

    if not descriptors:
        console.print("[yellow]No tools available.[/yellow]")
        return

    print_tools_table(descriptors)
