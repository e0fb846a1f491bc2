"""Line transports: the byte boundary of the session loop.

Each transport satisfies the :class:`LineTransport` protocol, providing
``connect``, ``read_line``, ``write_line``, and ``close`` methods over
newline-delimited UTF-8 text.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, BinaryIO, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Upper bound for a single inbound line; tool arguments are small.
_READ_LIMIT = 16 * 1024 * 1024


@runtime_checkable
class LineTransport(Protocol):
    """Abstract newline-delimited transport."""

    async def connect(self) -> None: ...
    async def read_line(self) -> str | None: ...
    async def write_line(self, line: str) -> None: ...
    async def close(self) -> None: ...


class StdioTransport:
    """Reads requests from stdin and writes responses to stdout.

    ``read_line`` returns ``None`` at end of stream. Every ``write_line`` is
    flushed before it returns so the client sees responses without delay.
    """

    def __init__(self, stdin: BinaryIO | None = None, stdout: BinaryIO | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin.buffer
        self._stdout = stdout if stdout is not None else sys.stdout.buffer
        self._reader: asyncio.StreamReader | None = None
        self._pipe: Any = None
        self._threaded = False
        self._connected = False
        self._closed = False

    async def connect(self) -> None:
        """Attach an asyncio reader to stdin.

        Pipes and sockets get a non-blocking stream reader. Anything the event
        loop cannot watch (a regular file redirected to stdin) is read in a
        worker thread instead.
        """
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=_READ_LIMIT)
        protocol = asyncio.StreamReaderProtocol(reader)
        try:
            self._pipe, _ = await loop.connect_read_pipe(lambda: protocol, self._stdin)
        except (ValueError, OSError, NotImplementedError):
            logger.debug("stdin is not a pipe; reading it in a worker thread")
            self._threaded = True
        else:
            self._reader = reader
        self._connected = True

    async def read_line(self) -> str | None:
        """Read the next line without its terminator, or ``None`` at EOF."""
        if not self._connected:
            msg = "Transport not connected"
            raise RuntimeError(msg)
        if self._closed:
            return None

        if self._threaded:
            raw = await asyncio.to_thread(self._stdin.readline)
        else:
            assert self._reader is not None
            try:
                raw = await self._reader.readline()
            except ValueError:
                logger.warning("Discarding inbound line longer than %d bytes", _READ_LIMIT)
                return ""

        if not raw:
            return None
        return raw.decode("utf-8", errors="replace").rstrip("\r\n")

    async def write_line(self, line: str) -> None:
        """Write *line* plus a newline and flush."""
        if self._closed:
            return
        try:
            self._stdout.write(line.encode("utf-8") + b"\n")
            self._stdout.flush()
        except (BrokenPipeError, OSError) as exc:
            self._closed = True
            logger.warning("stdio transport closed while sending: %s", exc)

    async def close(self) -> None:
        """Detach from stdin. stdout is left open for the interpreter to close."""
        self._closed = True
        if self._pipe is not None:
            self._pipe.close()
            self._pipe = None
