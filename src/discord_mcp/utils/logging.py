"""Logging setup. Diagnostics go to stderr so stdout stays a clean protocol channel."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

stderr_console = Console(stderr=True)

_FORMAT = "%(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Route all log records through a stderr :class:`RichHandler`.

    Safe to call more than once; earlier root handlers are replaced.
    """
    handler = RichHandler(console=stderr_console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter(_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
