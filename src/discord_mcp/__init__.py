"""discord-mcp: a Model Context Protocol server exposing Discord tools over stdio."""

from __future__ import annotations

__version__ = "0.1.0"
