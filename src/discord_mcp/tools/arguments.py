"""Argument extraction helpers shared by the built-in tools.

Each helper raises :class:`ToolArgumentError` with the message the client
sees in the failure payload.
"""

from __future__ import annotations

from typing import Any

from discord_mcp.tools.errors import ToolArgumentError

MAX_MESSAGE_LENGTH = 2000

_MAX_SNOWFLAKE = (1 << 64) - 1


def require(arguments: dict[str, Any], key: str) -> Any:
    """Return ``arguments[key]`` or fail with ``"<key> parameter is required"``.

    An explicit ``null`` counts as missing, so ``{"message": null}`` reports the
    field as required rather than as empty or malformed.
    """
    value = arguments.get(key)
    if value is None:
        raise ToolArgumentError(f"{key} parameter is required")
    return value


def require_snowflake(arguments: dict[str, Any], key: str) -> int:
    """Return a Discord id given as a decimal string (or a plain integer)."""
    value = require(arguments, key)
    if isinstance(value, bool):
        raise ToolArgumentError(f"Invalid {key} format")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
    else:
        raise ToolArgumentError(f"Invalid {key} format")
    if not 0 < parsed <= _MAX_SNOWFLAKE:
        raise ToolArgumentError(f"Invalid {key} format")
    return parsed


def require_message(arguments: dict[str, Any], key: str = "message") -> str:
    """Return message content that Discord will accept."""
    value = require(arguments, key)
    if not isinstance(value, str):
        raise ToolArgumentError(f"Invalid {key} format")
    if not value.strip():
        raise ToolArgumentError("Message content cannot be empty")
    if len(value) > MAX_MESSAGE_LENGTH:
        raise ToolArgumentError(f"Message content exceeds Discord's {MAX_MESSAGE_LENGTH} character limit")
    return value


def optional_int(
    arguments: dict[str, Any],
    key: str,
    *,
    default: int,
    minimum: int,
    maximum: int,
) -> int:
    value = arguments.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ToolArgumentError(f"Invalid {key} format")
    if not minimum <= value <= maximum:
        raise ToolArgumentError(f"{key.capitalize()} must be between {minimum} and {maximum}")
    return value


def optional_bool(arguments: dict[str, Any], key: str, *, default: bool) -> bool:
    value = arguments.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ToolArgumentError(f"Invalid {key} format")
    return value
