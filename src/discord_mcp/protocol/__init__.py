"""Protocol layer: JSON-RPC envelope, line transport and the session loop."""

from discord_mcp.protocol.codec import decode_request, encode_response, failure, success, tool_call_result
from discord_mcp.protocol.errors import DecodeError, ProtocolError
from discord_mcp.protocol.models import JsonRpcError, JsonRpcRequest, JsonRpcResponse, ServerInfo, ToolDescriptor
from discord_mcp.protocol.session import SessionLoop, SessionState
from discord_mcp.protocol.transport import LineTransport, StdioTransport

__all__ = [
    "DecodeError",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "LineTransport",
    "ProtocolError",
    "ServerInfo",
    "SessionLoop",
    "SessionState",
    "StdioTransport",
    "ToolDescriptor",
    "decode_request",
    "encode_response",
    "failure",
    "success",
    "tool_call_result",
]
