"""Shared error types for the tool layer."""


class ToolError(Exception):
    """Base error for all tool-layer failures."""


class DuplicateToolError(ToolError):
    """A tool name is already taken in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool already registered: {name}")


class ToolArgumentError(ToolError):
    """A tool was called with missing or malformed arguments."""


class ExecutionError(ToolError):
    """A tool could not complete its work (resource missing, permission denied, ...)."""
