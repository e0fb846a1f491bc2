"""Shared error types and JSON-RPC error codes for the protocol layer."""

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


class DecodeError(ProtocolError):
    """An input line is not a well-formed JSON-RPC 2.0 request."""

    def __init__(self, detail: str, line: str = "") -> None:
        self.detail = detail
        self.line = line
        super().__init__(f"Cannot decode request: {detail}")
