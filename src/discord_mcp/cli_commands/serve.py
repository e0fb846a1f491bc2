"""``discord-mcp serve``: run the MCP server on stdin/stdout."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from discord_mcp.cli_commands._output import err_console

_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file.",
)
@click.option(
    "--env-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Load environment variables from this .env file.",
)
@click.option(
    "--log-level",
    type=click.Choice(_LEVELS, case_sensitive=False),
    default=None,
    help="Override the configured log level.",
)
@click.option("--telemetry", is_flag=True, help="Enable OpenTelemetry tracing.")
def serve(
    config_path: Path | None,
    env_file: Path | None,
    log_level: str | None,
    telemetry: bool,
) -> None:
    """Serve Discord tools over stdio until input closes or a stop signal arrives."""
    from discord_mcp.chat.errors import RemoteApiError
    from discord_mcp.config import ConfigError, load_settings
    from discord_mcp.server import run_server
    from discord_mcp.utils.logging import configure_logging

    try:
        settings = load_settings(config_path, env_file)
        settings.require_token()
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    if log_level is not None:
        settings.log_level = log_level.upper()
    if telemetry:
        settings.telemetry.enabled = True

    configure_logging(settings.log_level)

    if settings.telemetry.enabled:
        from discord_mcp.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(
                export_to_console=settings.telemetry.otlp_endpoint is None,
                otlp_endpoint=settings.telemetry.otlp_endpoint,
            )
        except ImportError as exc:
            err_console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    try:
        asyncio.run(run_server(settings))
    except RemoteApiError as exc:
        err_console.print(f"[red]Discord login failed:[/red] {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        err_console.print("Interrupted.")
