"""SessionLoop: drives the read → decode → route → encode → write cycle.

One request is fully processed before the next line is read, so responses
leave in the order requests arrived. Requests without an id (notifications)
are routed like any other but never answered.

Lifecycle::

    RUNNING ──request_stop()──▶ DRAINING ──▶ STOPPED
       └────────────── end of input ─────────────┘
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from discord_mcp.protocol.codec import decode_request, encode_response, failure, success, tool_call_result
from discord_mcp.protocol.errors import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, DecodeError
from discord_mcp.protocol.models import InitializeResult, JsonRpcRequest, JsonRpcResponse, ServerInfo
from discord_mcp.utils.telemetry import ATTR_RPC_ERROR_CODE, ATTR_RPC_ID, ATTR_RPC_METHOD, get_tracer

if TYPE_CHECKING:
    from discord_mcp.protocol.transport import LineTransport
    from discord_mcp.tools.base import ToolContext
    from discord_mcp.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_PROTOCOL_VERSION = "2024-11-05"


class SessionState(Enum):
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class SessionLoop:
    """Serves one client over a :class:`LineTransport` until input ends or a stop is requested.

    The registry and context are injected; the loop owns neither. Closing the
    chat client is the caller's job once :meth:`run` returns.

    Usage::

        session = SessionLoop(registry, context, StdioTransport(), server_info=info)
        try:
            await session.run()
        finally:
            await client.close()
    """

    def __init__(
        self,
        registry: ToolRegistry,
        context: ToolContext,
        transport: LineTransport,
        *,
        server_info: ServerInfo,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
    ) -> None:
        self._registry = registry
        self._context = context
        self._transport = transport
        self._server_info = server_info
        self._protocol_version = protocol_version
        self._state = SessionState.RUNNING
        self._stop = asyncio.Event()

    @property
    def state(self) -> SessionState:
        return self._state

    def request_stop(self) -> None:
        """Ask the loop to finish the current iteration and stop. Idempotent."""
        if self._state is SessionState.RUNNING:
            logger.info("Stop requested; draining session")
            self._state = SessionState.DRAINING
        self._stop.set()

    async def run(self) -> None:
        """Serve requests until end of input or :meth:`request_stop`."""
        await self._transport.connect()
        try:
            while self._state is SessionState.RUNNING:
                line = await self._next_line()
                if line is None:
                    break
                if not line.strip():
                    continue
                response = await self.handle_line(line)
                if response is not None:
                    await self._transport.write_line(encode_response(response))
        finally:
            self._state = SessionState.STOPPED
            await self._transport.close()
            logger.info("Session stopped")

    async def handle_line(self, line: str) -> JsonRpcResponse | None:
        """Decode and handle one input line; ``None`` means nothing is written."""
        try:
            request = decode_request(line)
        except DecodeError as exc:
            logger.warning("Skipping undecodable input: %s", exc)
            return None
        return await self.handle_request(request)

    async def handle_request(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        """Route *request*; notifications and ``notifications/initialized`` yield ``None``."""
        with _tracer.start_as_current_span("rpc.request") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            if request.id is not None:
                span.set_attribute(ATTR_RPC_ID, str(request.id))

            try:
                response = await self._route(request)
            except Exception:
                logger.exception("Unhandled error while handling %s", request.method)
                response = failure(request.id, INTERNAL_ERROR, "Internal error")

            if request.is_notification or response is None:
                return None
            if response.error is not None:
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
            return response

    # -- routing -------------------------------------------------------------

    async def _route(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        method = request.method
        if method == "initialize":
            return success(request.id, self._initialize_result())
        if method == "notifications/initialized":
            logger.info("Client initialized")
            return None
        if method == "tools/list":
            return success(request.id, {"tools": [d.to_wire() for d in self._registry.list()]})
        if method == "tools/call":
            return await self._call_tool(request)
        if method == "ping":
            return success(request.id, {})

        logger.warning("Unknown method: %s", method)
        return failure(request.id, METHOD_NOT_FOUND, "Method not found")

    def _initialize_result(self) -> dict[str, Any]:
        result = InitializeResult(protocol_version=self._protocol_version, server_info=self._server_info)
        return result.model_dump(by_alias=True)

    async def _call_tool(self, request: JsonRpcRequest) -> JsonRpcResponse:
        params = request.params
        if not isinstance(params, dict):
            return failure(request.id, INVALID_PARAMS, "Invalid params: expected an object")

        name = params.get("name")
        if not isinstance(name, str):
            return failure(request.id, INVALID_PARAMS, "Invalid params: 'name' must be a string")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            return failure(request.id, INVALID_PARAMS, "Invalid params: 'arguments' must be an object")

        logger.info("Calling tool: %s", name)
        outcome = await self._registry.dispatch(name, self._context, arguments)
        return success(request.id, tool_call_result(outcome.payload()))

    # -- input ---------------------------------------------------------------

    async def _next_line(self) -> str | None:
        """Read one line, or ``None`` at end of input or once a stop is requested.

        A read still pending when the stop arrives is cancelled.
        """
        if self._stop.is_set():
            return None

        read = asyncio.ensure_future(self._transport.read_line())
        stop = asyncio.ensure_future(self._stop.wait())
        try:
            await asyncio.wait({read, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop.cancel()
            if not read.done():
                read.cancel()
                await asyncio.gather(read, return_exceptions=True)

        if self._stop.is_set() or read.cancelled():
            return None
        return read.result()
