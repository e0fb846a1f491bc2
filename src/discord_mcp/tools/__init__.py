"""Tool layer: the Tool capability, outcomes, registry and built-in Discord tools."""

from discord_mcp.tools.base import BaseTool, Tool, ToolContext
from discord_mcp.tools.errors import DuplicateToolError, ExecutionError, ToolArgumentError, ToolError
from discord_mcp.tools.members import GetChannelMembers
from discord_mcp.tools.messages import ReadChannelMessages, SendDirectMessage, SendMessage
from discord_mcp.tools.models import DispatchFailure, ToolFailure, ToolOutcome, ToolSuccess
from discord_mcp.tools.registry import ToolRegistry
from discord_mcp.tools.servers import GetServerChannels, GetServerInfo, GetServers

# Registration order is the order tools/list reports.
BUILTIN_TOOLS: tuple[type[BaseTool], ...] = (
    GetServers,
    GetServerInfo,
    GetServerChannels,
    GetChannelMembers,
    ReadChannelMessages,
    SendMessage,
    SendDirectMessage,
)

__all__ = [
    "BUILTIN_TOOLS",
    "BaseTool",
    "DispatchFailure",
    "DuplicateToolError",
    "ExecutionError",
    "Tool",
    "ToolArgumentError",
    "ToolContext",
    "ToolError",
    "ToolFailure",
    "ToolOutcome",
    "ToolRegistry",
    "ToolSuccess",
]
