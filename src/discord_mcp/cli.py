"""discord-mcp CLI entrypoint."""

from __future__ import annotations

import click

from discord_mcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="discord-mcp")
def main() -> None:
    """discord-mcp: Discord tools for Model Context Protocol hosts."""


# Register subcommands
from discord_mcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
