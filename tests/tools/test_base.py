"""Tests for BaseTool failure mapping and the Tool capability."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from discord_mcp.chat.errors import RemoteApiError
from discord_mcp.tools import BUILTIN_TOOLS
from discord_mcp.tools.base import BaseTool, Tool, ToolContext
from discord_mcp.tools.errors import ExecutionError, ToolArgumentError
from discord_mcp.tools.models import ToolFailure, ToolOutcome, ToolSuccess
from tests.conftest import make_context


class Raising(BaseTool):
    name = "raising"
    description = "raises whatever it is given"

    def __init__(self, exc: BaseException | None = None) -> None:
        self._exc = exc

    async def run(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        if self._exc is not None:
            raise self._exc
        return ToolSuccess(data={"ok": 1})


class TestBaseTool:
    async def test_success_passes_through(self) -> None:
        assert await Raising().execute(make_context(), {}) == ToolSuccess(data={"ok": 1})

    async def test_argument_error_becomes_failure(self) -> None:
        outcome = await Raising(ToolArgumentError("x parameter is required")).execute(make_context(), {})
        assert outcome == ToolFailure(error="x parameter is required")

    async def test_execution_error_becomes_failure(self) -> None:
        outcome = await Raising(ExecutionError("gone")).execute(make_context(), {})
        assert outcome == ToolFailure(error="gone")

    async def test_remote_error_is_prefixed(self) -> None:
        outcome = await Raising(RemoteApiError("Missing Permissions", status=403)).execute(make_context(), {})
        assert outcome == ToolFailure(error="Discord API error: Missing Permissions")

    async def test_unexpected_error_becomes_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR):
            outcome = await Raising(ValueError("bad payload")).execute(make_context(), {})
        assert outcome == ToolFailure(error="bad payload")
        assert outcome.payload() == {"success": False, "error": "bad payload"}
        assert "Tool raising failed" in caplog.text

    async def test_cancellation_is_not_swallowed(self) -> None:
        with pytest.raises(asyncio.CancelledError):
            await Raising(asyncio.CancelledError()).execute(make_context(), {})

    def test_descriptor(self) -> None:
        descriptor = Raising().descriptor()
        assert descriptor.name == "raising"
        assert descriptor.description == "raises whatever it is given"
        assert descriptor.input_schema["type"] == "object"


class TestBuiltinTools:
    def test_unique_names(self) -> None:
        names = [cls.name for cls in BUILTIN_TOOLS]
        assert len(names) == len(set(names)) == 7

    @pytest.mark.parametrize("tool_cls", BUILTIN_TOOLS)
    def test_satisfies_tool_capability(self, tool_cls: type[BaseTool]) -> None:
        tool = tool_cls()
        assert isinstance(tool, Tool)
        schema = tool.input_schema
        assert schema["type"] == "object"
        assert set(schema["required"]) <= set(schema["properties"])
