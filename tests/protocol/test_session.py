"""Tests for the RPC session loop."""

from __future__ import annotations

import asyncio
import json
from typing import Any

from discord_mcp.protocol.models import ServerInfo
from discord_mcp.protocol.session import SessionLoop, SessionState
from discord_mcp.tools.base import EMPTY_SCHEMA, ToolContext
from discord_mcp.tools.messages import SendMessage
from discord_mcp.tools.models import ToolOutcome, ToolSuccess
from discord_mcp.tools.registry import ToolRegistry
from tests.conftest import FakeTransport, make_context, request_line


class StaticTool:
    """Returns a fixed success payload."""

    def __init__(self, name: str, data: dict[str, Any] | None = None) -> None:
        self.name = name
        self.description = f"{name} tool"
        self.input_schema = EMPTY_SCHEMA
        self._data = data or {}
        self.calls: list[dict[str, Any]] = []

    async def execute(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        self.calls.append(arguments)
        return ToolSuccess(data=self._data)


class ExplodingTool:
    name = "explode"
    description = "always raises"
    input_schema = EMPTY_SCHEMA

    async def execute(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
        raise RuntimeError("kaboom")


def _registry(*tools: Any) -> ToolRegistry:
    registry = ToolRegistry()
    for tool in tools:
        registry.register(tool)
    return registry


def _session(lines: list[str], registry: ToolRegistry | None = None) -> tuple[SessionLoop, FakeTransport]:
    transport = FakeTransport(lines)
    session = SessionLoop(
        registry if registry is not None else _registry(),
        make_context(),
        transport,
        server_info=ServerInfo(name="MCP-Discord", version="1.0.0"),
    )
    return session, transport


def _tool_text(response: dict[str, Any]) -> dict[str, Any]:
    return json.loads(response["result"]["content"][0]["text"])


class TestLifecycle:
    async def test_eof_stops_and_closes_transport(self) -> None:
        session, transport = _session([])
        assert session.state is SessionState.RUNNING
        await session.run()
        assert session.state is SessionState.STOPPED
        assert transport.connected
        assert transport.closed
        assert transport.written == []

    async def test_blank_lines_are_skipped(self) -> None:
        session, transport = _session(["", "   ", request_line("ping", request_id=1)])
        await session.run()
        assert transport.responses() == [{"jsonrpc": "2.0", "id": 1, "result": {}}]

    async def test_undecodable_lines_are_skipped(self) -> None:
        session, transport = _session(["{not json", "[1]", request_line("ping", request_id=7)])
        await session.run()
        responses = transport.responses()
        assert len(responses) == 1
        assert responses[0]["id"] == 7

    async def test_request_stop_while_waiting_for_input(self) -> None:
        class BlockingTransport(FakeTransport):
            async def read_line(self) -> str | None:
                await asyncio.Event().wait()
                return None

        transport = BlockingTransport()
        session = SessionLoop(
            _registry(), make_context(), transport, server_info=ServerInfo(name="s", version="1")
        )
        task = asyncio.create_task(session.run())
        await asyncio.sleep(0.01)

        session.request_stop()
        assert session.state is SessionState.DRAINING
        await asyncio.wait_for(task, timeout=1)

        assert session.state is SessionState.STOPPED
        assert transport.closed

    async def test_current_request_completes_after_stop(self) -> None:
        holder: dict[str, SessionLoop] = {}

        class StoppingTool(StaticTool):
            async def execute(self, context: ToolContext, arguments: dict[str, Any]) -> ToolOutcome:
                holder["session"].request_stop()
                return await super().execute(context, arguments)

        session, transport = _session(
            [
                request_line("tools/call", {"name": "stopper", "arguments": {}}, request_id=1),
                request_line("ping", request_id=2),
            ],
            _registry(StoppingTool("stopper", {"done": True})),
        )
        holder["session"] = session
        await session.run()

        responses = transport.responses()
        assert [r["id"] for r in responses] == [1]
        assert _tool_text(responses[0]) == {"success": True, "done": True}
        assert session.state is SessionState.STOPPED

    async def test_request_stop_is_idempotent(self) -> None:
        session, _ = _session([])
        session.request_stop()
        session.request_stop()
        assert session.state is SessionState.DRAINING
        await session.run()
        assert session.state is SessionState.STOPPED


class TestRouting:
    async def test_initialize(self) -> None:
        session, transport = _session([request_line("initialize", {}, request_id=1)])
        await session.run()
        assert transport.responses() == [
            {
                "jsonrpc": "2.0",
                "id": 1,
                "result": {
                    "protocolVersion": "2024-11-05",
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": "MCP-Discord", "version": "1.0.0"},
                },
            }
        ]

    async def test_initialized_notification_produces_no_output(self) -> None:
        session, transport = _session(['{"jsonrpc":"2.0","method":"notifications/initialized","params":{}}'])
        await session.run()
        assert transport.written == []

    async def test_initialized_with_id_is_still_unanswered(self) -> None:
        session, transport = _session(
            [
                '{"jsonrpc":"2.0","id":9,"method":"notifications/initialized","params":{}}',
                request_line("ping", request_id=10),
            ]
        )
        await session.run()
        assert [r["id"] for r in transport.responses()] == [10]

    async def test_tools_list_in_registration_order(self) -> None:
        registry = _registry(SendMessage(), StaticTool("get_servers"))
        session, transport = _session(['{"jsonrpc":"2.0","id":1,"method":"tools/list","params":{}}'], registry)
        await session.run()

        tools = transport.responses()[0]["result"]["tools"]
        assert [t["name"] for t in tools] == ["send_message", "get_servers"]
        assert set(tools[0]) == {"name", "description", "inputSchema"}

    async def test_tool_failure_is_a_result_not_an_error(self) -> None:
        registry = _registry(SendMessage(), StaticTool("get_servers"))
        line = (
            '{"jsonrpc":"2.0","id":2,"method":"tools/call",'
            '"params":{"name":"send_message","arguments":{"channelId":"123"}}}'
        )
        session, transport = _session([line], registry)
        await session.run()

        response = transport.responses()[0]
        assert "error" not in response
        assert _tool_text(response) == {"success": False, "error": "message parameter is required"}

    async def test_tools_call_passes_arguments(self) -> None:
        tool = StaticTool("echo", {"value": 1})
        session, transport = _session(
            [request_line("tools/call", {"name": "echo", "arguments": {"x": "y"}}, request_id=3)],
            _registry(tool),
        )
        await session.run()
        assert tool.calls == [{"x": "y"}]
        assert _tool_text(transport.responses()[0]) == {"success": True, "value": 1}

    async def test_missing_arguments_defaults_to_empty(self) -> None:
        tool = StaticTool("echo")
        session, _ = _session([request_line("tools/call", {"name": "echo"}, request_id=3)], _registry(tool))
        await session.run()
        assert tool.calls == [{}]

    async def test_unknown_tool(self) -> None:
        session, transport = _session(
            [request_line("tools/call", {"name": "nonexistent-tool", "arguments": {}}, request_id=4)]
        )
        await session.run()
        assert _tool_text(transport.responses()[0]) == {"error": "Tool 'nonexistent-tool' not found"}

    async def test_ping(self) -> None:
        session, transport = _session([request_line("ping", request_id="p")])
        await session.run()
        assert transport.responses() == [{"jsonrpc": "2.0", "id": "p", "result": {}}]

    async def test_unknown_method_with_id(self) -> None:
        session, transport = _session([request_line("resources/list", {}, request_id=5)])
        await session.run()
        assert transport.responses() == [
            {"jsonrpc": "2.0", "id": 5, "error": {"code": -32601, "message": "Method not found"}}
        ]

    async def test_unknown_method_without_id(self) -> None:
        session, transport = _session([request_line("notifications/cancelled", {})])
        await session.run()
        assert transport.written == []

    async def test_tools_call_notification_gets_no_response(self) -> None:
        tool = StaticTool("echo")
        session, transport = _session([request_line("tools/call", {"name": "echo", "arguments": {}})], _registry(tool))
        await session.run()
        assert transport.written == []


class TestInvalidToolCallParams:
    """Malformed tools/call params are answered with -32602 Invalid params."""

    async def test_missing_name(self) -> None:
        session, transport = _session([request_line("tools/call", {"arguments": {}}, request_id=1)])
        await session.run()
        assert transport.responses()[0]["error"]["code"] == -32602

    async def test_non_string_name(self) -> None:
        session, transport = _session([request_line("tools/call", {"name": 5}, request_id=1)])
        await session.run()
        assert transport.responses()[0]["error"]["code"] == -32602

    async def test_non_object_arguments(self) -> None:
        tool = StaticTool("echo")
        session, transport = _session(
            [request_line("tools/call", {"name": "echo", "arguments": [1, 2]}, request_id=1)], _registry(tool)
        )
        await session.run()
        assert transport.responses()[0]["error"]["code"] == -32602
        assert tool.calls == []

    async def test_array_params(self) -> None:
        session, transport = _session([request_line("tools/call", ["echo"], request_id=1)])
        await session.run()
        assert transport.responses()[0]["error"]["code"] == -32602


class TestIsolationAndOrdering:
    async def test_exploding_tool_yields_one_line_and_loop_continues(self) -> None:
        session, transport = _session(
            [
                request_line("tools/call", {"name": "explode", "arguments": {}}, request_id=1),
                request_line("ping", request_id=2),
            ],
            _registry(ExplodingTool()),
        )
        await session.run()

        responses = transport.responses()
        assert [r["id"] for r in responses] == [1, 2]
        assert _tool_text(responses[0]) == {"error": "Tool execution failed: kaboom"}

    async def test_responses_follow_request_order(self) -> None:
        lines = [
            request_line("ping", request_id=1),
            request_line("notifications/initialized", {}),
            request_line("tools/list", {}, request_id="two"),
            request_line("bogus", {}, request_id=3),
            request_line("initialize", {}, request_id=4),
        ]
        session, transport = _session(lines, _registry(StaticTool("a")))
        await session.run()

        responses = transport.responses()
        assert [r["id"] for r in responses] == [1, "two", 3, 4]
        for response in responses:
            assert ("result" in response) != ("error" in response)

    async def test_unexpected_routing_error_becomes_internal_error(self) -> None:
        class BrokenRegistry(ToolRegistry):
            def list(self):  # type: ignore[override]
                raise RuntimeError("registry broken")

        session, transport = _session(
            [request_line("tools/list", {}, request_id=1), request_line("ping", request_id=2)],
            BrokenRegistry(),
        )
        await session.run()

        responses = transport.responses()
        assert responses[0]["error"] == {"code": -32603, "message": "Internal error"}
        assert responses[1]["result"] == {}


class TestHandleLine:
    async def test_returns_none_for_notification(self) -> None:
        session, _ = _session([])
        assert await session.handle_line(request_line("notifications/initialized", {})) is None

    async def test_returns_response_for_request(self) -> None:
        session, _ = _session([])
        response = await session.handle_line(request_line("ping", request_id=9))
        assert response is not None
        assert response.id == 9
        assert response.result == {}
