"""Whole-buffer reads and writes over a stream socket.

A single ``recv`` or ``send`` may move fewer bytes than asked for; these
helpers loop until the full length has been transferred. Any object with
socket-style ``recv(n)`` and ``send(data)`` methods is accepted.
"""

from __future__ import annotations

import logging

from ..errors import TransportError

logger = logging.getLogger(__name__)


def reliable_read(sock, n: int) -> bytes:
    """Read exactly ``n`` bytes from ``sock``.

    Raises:
        TransportError: If ``recv`` fails, or the peer closes the stream
            before ``n`` bytes have arrived.
    """
    buf = bytearray()
    while len(buf) < n:
        try:
            chunk = sock.recv(n - len(buf))
        except OSError as e:
            raise TransportError(f"recv failed after {len(buf)}/{n} bytes: {e}") from e
        if not chunk:
            raise TransportError(
                f"Connection closed by peer after {len(buf)}/{n} bytes"
            )
        buf += chunk
    return bytes(buf)


def reliable_write(sock, data: bytes) -> None:
    """Write all of ``data`` to ``sock``.

    Raises:
        TransportError: If ``send`` fails or stops making progress.
    """
    view = memoryview(data)
    total = len(view)
    sent = 0
    while sent < total:
        try:
            num = sock.send(view[sent:])
        except OSError as e:
            raise TransportError(f"send failed after {sent}/{total} bytes: {e}") from e
        if num <= 0:
            raise TransportError(f"send made no progress after {sent}/{total} bytes")
        sent += num
    logger.debug("Wrote %d bytes", total)
