"""Envelope codec: stateless conversion between wire lines and protocol models.

Every encoded message is exactly one line: ``json.dumps`` escapes control
characters inside strings, so tool text never introduces a raw newline.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from discord_mcp.protocol.errors import DecodeError
from discord_mcp.protocol.models import (
    CallToolResult,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    RequestId,
    TextContent,
)


def decode_request(line: str) -> JsonRpcRequest:
    """Parse one input line into a :class:`JsonRpcRequest`.

    Raises:
        DecodeError: If the line is not JSON, not an object, or not a valid
            JSON-RPC 2.0 request shape.
    """
    try:
        data: Any = json.loads(line)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"invalid JSON ({exc.msg})", line) from exc

    if not isinstance(data, dict):
        raise DecodeError("expected a JSON object", line)
    if data.get("jsonrpc") != "2.0":
        raise DecodeError("missing or unsupported 'jsonrpc' version", line)

    try:
        return JsonRpcRequest.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise DecodeError(f"invalid field(s): {fields}", line) from exc


def encode_response(response: JsonRpcResponse) -> str:
    """Serialise *response* to a single line (without the trailing newline)."""
    return json.dumps(response.to_wire())


def success(request_id: RequestId | None, result: Any) -> JsonRpcResponse:
    """Build a result response."""
    return JsonRpcResponse(id=request_id, result=result)


def failure(request_id: RequestId | None, code: int, message: str, data: Any = None) -> JsonRpcResponse:
    """Build an error response."""
    return JsonRpcResponse(id=request_id, error=JsonRpcError(code=code, message=message, data=data))


def tool_call_result(payload: Any) -> dict[str, Any]:
    """Wrap a tool payload as a ``tools/call`` result with one text part."""
    result = CallToolResult(content=[TextContent(text=json.dumps(payload))])
    return result.model_dump()
