"""ToolRegistry: the authoritative name-to-tool map and the dispatch boundary.

The registry is built once at startup (:meth:`ToolRegistry.discover`) and only
read afterwards. :meth:`ToolRegistry.dispatch` never raises: a missing tool or
a tool that blows up becomes a :class:`DispatchFailure` outcome.

Discovery draws on two sources:

1. The static table of built-in tool classes (:data:`discord_mcp.tools.BUILTIN_TOOLS`).
2. Installed plugins advertising tool classes or factories under the
   ``discord_mcp.tools`` entry-point group.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Any

from discord_mcp.protocol.models import ToolDescriptor
from discord_mcp.tools.errors import DuplicateToolError
from discord_mcp.tools.models import DispatchFailure, ToolFailure, ToolOutcome, ToolSuccess
from discord_mcp.utils.telemetry import ATTR_TOOL_NAME, ATTR_TOOL_OUTCOME, get_tracer

if TYPE_CHECKING:
    from discord_mcp.tools.base import Tool, ToolContext

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

PLUGIN_GROUP = "discord_mcp.tools"

ToolFactory = Callable[[], "Tool"]


class ToolRegistry:
    """Holds tools keyed by unique name, in registration order.

    Usage::

        registry = ToolRegistry(tool_timeout=30.0)
        registry.discover()

        registry.list()                                   # descriptors
        outcome = await registry.dispatch("send_message", context, {...})
    """

    def __init__(self, *, tool_timeout: float | None = None) -> None:
        self._tools: dict[str, Tool] = {}
        self._tool_timeout = tool_timeout

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def register(self, tool: Tool) -> None:
        """Add *tool* under its declared name.

        Raises:
            DuplicateToolError: If the name is already registered. The first
                registration is kept.
        """
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = tool

    def discover(
        self,
        factories: Iterable[ToolFactory] | None = None,
        *,
        include_plugins: bool = True,
        disabled: Iterable[str] = (),
    ) -> int:
        """Instantiate and register every enabled tool; return how many were added.

        *factories* defaults to the built-in tool table. Factories whose
        ``enabled`` attribute is false, and tools whose name is in *disabled*,
        are skipped. Construction failures, broken plugins and duplicate names
        are logged and skipped; discovery itself never fails.
        """
        if factories is None:
            from discord_mcp.tools import BUILTIN_TOOLS

            factories = BUILTIN_TOOLS

        candidates = list(factories)
        if include_plugins:
            candidates.extend(self._plugin_factories())

        skip = set(disabled)
        added = 0
        for factory in candidates:
            label = getattr(factory, "__name__", repr(factory))
            if getattr(factory, "enabled", True) is False:
                logger.debug("Skipping disabled tool %s", label)
                continue
            try:
                tool = factory()
                name = tool.name
            except Exception as exc:
                logger.error("Failed to register tool %s: %s", label, exc)
                continue
            if name in skip:
                logger.info("Tool disabled by configuration: %s", name)
                continue
            try:
                self.register(tool)
            except DuplicateToolError as exc:
                logger.error("Failed to register tool %s: %s", label, exc)
                continue
            logger.info("Registered tool: %s", name)
            added += 1

        logger.info("Discovered %d tools total", len(self._tools))
        return added

    def list(self) -> list[ToolDescriptor]:
        """Return the descriptor of every tool, in registration order."""
        return [
            ToolDescriptor(name=tool.name, description=tool.description, input_schema=tool.input_schema)
            for tool in self._tools.values()
        ]

    async def dispatch(self, name: str, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        """Execute the named tool in isolation.

        Returns the tool's own outcome unchanged on success. A missing tool,
        an exception escaping the tool, or an expired ``tool_timeout`` becomes a
        :class:`DispatchFailure`.
        """
        with _tracer.start_as_current_span("tool.dispatch") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            outcome = await self._dispatch(name, context, arguments)
            span.set_attribute(ATTR_TOOL_OUTCOME, outcome.kind)
            return outcome

    async def _dispatch(self, name: str, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        tool = self._tools.get(name)
        if tool is None:
            logger.warning("Tool not found: %s", name)
            return DispatchFailure(error=f"Tool '{name}' not found")

        try:
            if self._tool_timeout is None:
                result = await tool.execute(context, arguments)
            else:
                result = await asyncio.wait_for(tool.execute(context, arguments), timeout=self._tool_timeout)
        except TimeoutError as exc:
            if self._tool_timeout is None:
                logger.exception("Tool execution error in %s", name)
                return DispatchFailure(error=f"Tool execution failed: {exc}")
            logger.error("Tool execution error in %s: timed out after %ss", name, self._tool_timeout)
            return DispatchFailure(error=f"Tool execution failed: timed out after {self._tool_timeout}s")
        except Exception as exc:
            logger.exception("Tool execution error in %s", name)
            return DispatchFailure(error=f"Tool execution failed: {exc}")

        if not isinstance(result, (ToolSuccess, ToolFailure, DispatchFailure)):
            logger.error("Tool %s returned %s instead of an outcome", name, type(result).__name__)
            return DispatchFailure(error=f"Tool execution failed: unexpected result type {type(result).__name__}")
        return result

    @staticmethod
    def _plugin_factories() -> list[ToolFactory]:
        """Load tool factories advertised by installed plugins."""
        factories: list[ToolFactory] = []
        for ep in entry_points(group=PLUGIN_GROUP):
            try:
                factories.append(ep.load())
            except Exception as exc:
                logger.error("Failed to load tool plugin %s: %s", ep.name, exc)
        return factories
