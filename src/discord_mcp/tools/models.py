"""Tool outcomes: the tagged union every tool execution resolves to.

Each variant knows its wire payload:

- :class:`ToolSuccess` → ``{"success": true, **data}``
- :class:`ToolFailure` → ``{"success": false, "error": ...}``
- :class:`DispatchFailure` → ``{"error": ...}`` (raised by the registry itself:
  unknown tool, or a tool that crashed)
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class ToolSuccess(BaseModel):
    """The tool did its work; *data* is merged into the payload."""

    kind: Literal["success"] = "success"
    data: dict[str, Any] = Field(default_factory=dict)

    def payload(self) -> dict[str, Any]:
        return {"success": True, **self.data}


class ToolFailure(BaseModel):
    """The tool rejected the call or the remote service refused it."""

    kind: Literal["failure"] = "failure"
    error: str

    def payload(self) -> dict[str, Any]:
        return {"success": False, "error": self.error}


class DispatchFailure(BaseModel):
    """The registry could not obtain an outcome from a tool."""

    kind: Literal["dispatch_failure"] = "dispatch_failure"
    error: str

    def payload(self) -> dict[str, Any]:
        return {"error": self.error}


ToolOutcome = Annotated[ToolSuccess | ToolFailure | DispatchFailure, Field(discriminator="kind")]
