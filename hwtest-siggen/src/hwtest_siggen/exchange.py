"""Request/response exchange over a byte transport.

The board's replies are not length-prefixed; the only frame boundary is the
terminator sequence, so the response is accumulated across as many partial
reads as it takes. Each read attempt has one of three outcomes:

- progress: bytes arrived and are appended to the response buffer;
- no data yet: the transport returned nothing or raised :class:`TimeoutError`
  (the short per-read timeout elapsed), so the loop keeps waiting;
- fault: any other :class:`OSError`, which aborts the exchange.

The per-read timeout of the transport is independent of the frame deadline
enforced here.

Multi-line replies end with an ``OK`` line, but the board rejects a command
with a single error line (prefix token containing ``ERR``) and no ``OK``.
For such exchanges a complete error line also ends the response.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from hwtest_siggen.commands import LINE_TERMINATOR
from hwtest_siggen.errors import (
    ExchangeTimeoutError,
    FlushFailedError,
    ReadFailedError,
    WriteFailedError,
)

if TYPE_CHECKING:
    from hwtest_siggen.transport import SerialTransport

logger = logging.getLogger(__name__)

CHUNK_SIZE = 256
DEFAULT_FRAME_TIMEOUT = 0.5
ERROR_MARKER = "ERR"


def exchange(
    transport: SerialTransport,
    wire_command: str,
    frame_timeout: float = DEFAULT_FRAME_TIMEOUT,
    *,
    terminator: str = LINE_TERMINATOR,
    chunk_size: int = CHUNK_SIZE,
    discard_stale: bool = True,
) -> str:
    """Send one command line and collect its framed response.

    Args:
        transport: An open transport.
        wire_command: Encoded command without terminator (e.g. ``"$FCG,0"``).
        frame_timeout: Deadline in seconds for the complete response.
        terminator: Sequence that ends the response. ``"\\r\\n"`` for
            single-line replies, ``"OK\\r\\n"`` for multi-line replies.
        chunk_size: Maximum bytes requested per read attempt.
        discard_stale: Drop unread input before writing, so late bytes from
            an earlier timed-out exchange are not taken as this response.

    Returns:
        The accumulated response text, including the terminator (or the
        error line that ended a multi-line reply).

    Raises:
        WriteFailedError: The transport rejected the outbound frame.
        FlushFailedError: The frame could not be flushed to the wire.
        ReadFailedError: A non-timeout I/O fault occurred while reading.
        ExchangeTimeoutError: The terminator did not arrive in time.
    """
    frame = f"{wire_command}{LINE_TERMINATOR}".encode("ascii", errors="replace")

    if discard_stale:
        _discard(transport)

    logger.debug("TX: %r", wire_command)
    try:
        transport.write(frame)
    except OSError as exc:
        raise WriteFailedError(wire_command, f"Failed to write to the port: {exc}") from exc

    try:
        transport.flush()
    except OSError as exc:
        raise FlushFailedError(wire_command, f"Failed to flush the port: {exc}") from exc

    buffer = ""
    start = time.monotonic()

    while not _is_complete(buffer, terminator):
        if time.monotonic() - start >= frame_timeout:
            logger.debug("Timeout waiting for %r, partial response %r", wire_command, buffer)
            _discard(transport)
            raise ExchangeTimeoutError(wire_command, frame_timeout, buffer)

        try:
            data = transport.read(chunk_size)
        except TimeoutError:
            continue
        except OSError as exc:
            raise ReadFailedError(wire_command, f"Failed to read from the port: {exc}") from exc

        if data:
            buffer += data.decode("utf-8", errors="replace")

    logger.debug("RX: %r", buffer)
    return buffer


def _is_complete(buffer: str, terminator: str) -> bool:
    """Return True once the response is framed.

    For multi-line terminators, any complete line whose prefix token
    contains :data:`ERROR_MARKER` also completes the response.
    """
    if terminator in buffer:
        return True
    if terminator == LINE_TERMINATOR:
        return False
    lines = buffer.split(LINE_TERMINATOR)[:-1]
    return any(ERROR_MARKER in line.split(",", 1)[0] for line in lines)


def _discard(transport: SerialTransport) -> None:
    try:
        transport.discard_input()
    except OSError as exc:
        logger.warning("Failed to discard pending input: %s", exc)
