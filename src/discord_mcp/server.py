"""Process wiring: build the collaborators, serve one session, tear down."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

from discord_mcp.chat.discord import DiscordClient
from discord_mcp.protocol.models import ServerInfo
from discord_mcp.protocol.session import SessionLoop
from discord_mcp.protocol.transport import StdioTransport
from discord_mcp.tools.base import ToolContext
from discord_mcp.tools.registry import ToolRegistry

if TYPE_CHECKING:
    from discord_mcp.chat.client import ChatClient
    from discord_mcp.config import ServerSettings
    from discord_mcp.protocol.transport import LineTransport

logger = logging.getLogger(__name__)

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def build_registry(settings: ServerSettings) -> ToolRegistry:
    """Discover every enabled tool according to *settings*."""
    registry = ToolRegistry(tool_timeout=settings.tool_timeout)
    registry.discover(disabled=settings.disabled_tools)
    return registry


async def run_server(
    settings: ServerSettings,
    *,
    client: ChatClient | None = None,
    transport: LineTransport | None = None,
) -> None:
    """Log in, discover tools and serve requests until input ends or a stop signal arrives.

    The chat client is closed on the way out, whatever happened.

    Raises:
        ConfigError: If no bot token is configured.
        RemoteApiError: If Discord rejects the token at startup.
    """
    if client is None:
        client = DiscordClient(
            settings.require_token(),
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
        )

    try:
        me = await client.get_current_user()
        logger.info("Logged in as %s (%s)", me.username, me.id)

        registry = build_registry(settings)
        session = SessionLoop(
            registry,
            ToolContext(client=client, settings=settings),
            transport if transport is not None else StdioTransport(),
            server_info=ServerInfo(name=settings.server_name, version=settings.server_version),
            protocol_version=settings.protocol_version,
        )

        installed = _install_signal_handlers(session)
        logger.info("MCP Discord server started, waiting for requests...")
        try:
            await session.run()
        finally:
            _remove_signal_handlers(installed)
    finally:
        await client.close()
        logger.info("Discord client closed")


def _install_signal_handlers(session: SessionLoop) -> list[signal.Signals]:
    loop = asyncio.get_running_loop()
    installed = []
    for sig in _STOP_SIGNALS:
        try:
            loop.add_signal_handler(sig, session.request_stop)
        except (NotImplementedError, RuntimeError, ValueError):
            # Not on the main thread, or a platform without loop signal support.
            logger.debug("Cannot install handler for %s", sig.name)
            continue
        installed.append(sig)
    return installed


def _remove_signal_handlers(installed: list[signal.Signals]) -> None:
    loop = asyncio.get_running_loop()
    for sig in installed:
        loop.remove_signal_handler(sig)
