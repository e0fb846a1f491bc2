"""Tool capability and the base class for built-in tools.

Anything with ``name``, ``description``, ``input_schema`` and an async
``execute(context, arguments)`` satisfies :class:`Tool` and can be registered.
:class:`BaseTool` adds the shared failure mapping used by the built-in tools.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable

from discord_mcp.chat.errors import RemoteApiError
from discord_mcp.config import ServerSettings
from discord_mcp.protocol.models import ToolDescriptor
from discord_mcp.tools.errors import ExecutionError, ToolArgumentError
from discord_mcp.tools.models import ToolFailure, ToolOutcome

if TYPE_CHECKING:
    from discord_mcp.chat.client import ChatClient

logger = logging.getLogger(__name__)

EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}, "required": []}


@dataclass(frozen=True)
class ToolContext:
    """What every tool execution receives besides its arguments."""

    client: ChatClient
    settings: ServerSettings = field(default_factory=ServerSettings)


@runtime_checkable
class Tool(Protocol):
    """A named unit of work invocable through ``tools/call``."""

    name: str
    description: str
    input_schema: dict[str, Any]

    async def execute(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome: ...


class BaseTool(ABC):
    """Base class for tools shipped with the server.

    Subclasses declare ``name``, ``description`` and ``input_schema`` as class
    attributes and implement :meth:`run`. Set ``enabled = False`` to keep a
    tool out of discovery.

    :meth:`execute` maps failures raised by :meth:`run` onto :class:`ToolFailure`:

    - :class:`ToolArgumentError` / :class:`ExecutionError` → their message
    - :class:`RemoteApiError` → ``"Discord API error: <message>"``
    - any other exception → its message, logged with the traceback

    Cancellation is not caught.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    input_schema: ClassVar[dict[str, Any]] = EMPTY_SCHEMA
    enabled: ClassVar[bool] = True

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(name=self.name, description=self.description, input_schema=self.input_schema)

    async def execute(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        try:
            return await self.run(context, arguments)
        except (ToolArgumentError, ExecutionError) as exc:
            return ToolFailure(error=str(exc))
        except RemoteApiError as exc:
            logger.warning("Discord API error in %s: %s", self.name, exc.message)
            return ToolFailure(error=f"Discord API error: {exc.message}")
        except Exception as exc:
            logger.exception("Tool %s failed", self.name)
            return ToolFailure(error=str(exc))

    @abstractmethod
    async def run(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        """Do the tool's work. Raise the tool-layer errors for expected failures."""
