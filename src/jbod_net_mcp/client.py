"""Synchronous JBOD client operations.

Each operation sends one request and waits for its response. Every failure,
whether the server was unreachable or it rejected the operation, is reduced
to a single failure result for the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import JbodConnectionError, JbodError, ProtocolError
from .protocol.commands import JBOD_PORT, JBOD_SERVER, Opcode
from .transport.tcp_connection import JbodConnection

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Outcome of one request/response round trip.

    ``opcode`` and ``status`` come from the response header and are ``None``
    when no header was received. ``block`` is the 256-byte payload the
    response carried, or ``None`` when it carried none.
    """

    ok: bool
    opcode: int | None = None
    status: int | None = None
    error: JbodError | None = None
    block: bytes | None = None

    @property
    def code(self) -> int:
        return 0 if self.ok else -1


def connect(host: str = JBOD_SERVER, port: int = JBOD_PORT) -> JbodConnection:
    """Open a connection to a JBOD server.

    Raises:
        JbodConnectionError: If the address is invalid or the connect fails.
    """
    conn = JbodConnection(host, port)
    conn.open()
    return conn


def jbod_connect(host: str = JBOD_SERVER, port: int = JBOD_PORT) -> JbodConnection | None:
    """Like :func:`connect`, but returns ``None`` instead of raising."""
    try:
        return connect(host, port)
    except JbodConnectionError as e:
        logger.debug("Connect failed: %s", e)
        return None


def disconnect(conn: JbodConnection) -> None:
    conn.close()


def client_operation(
    conn: JbodConnection,
    opcode: int | Opcode,
    block: bytes | bytearray | memoryview | None = None,
) -> OperationResult:
    """Send one request and receive its response.

    Args:
        conn: An open connection.
        opcode: Raw opcode or decoded :class:`Opcode`.
        block: For WRITE_BLOCK, the 256 bytes to send. For requests whose
            response carries a block, a writable buffer to fill; the block is
            also returned on :attr:`OperationResult.block`.
    """
    try:
        conn.send_packet(opcode, block)
    except JbodError as e:
        logger.debug("Request %r not sent: %s", opcode, e)
        return OperationResult(ok=False, error=e)

    try:
        header = conn.recv_packet(block)
    except ProtocolError as e:
        logger.debug("Request %r failed: %s", opcode, e)
        if e.header is not None:
            return OperationResult(
                ok=False, opcode=e.header.opcode, status=e.header.status, error=e
            )
        return OperationResult(ok=False, error=e)
    except JbodError as e:
        logger.debug("No response to %r: %s", opcode, e)
        return OperationResult(ok=False, error=e)

    return OperationResult(
        ok=True, opcode=header.opcode, status=header.status, block=header.payload
    )


def perform(
    conn: JbodConnection,
    opcode: int | Opcode,
    block: bytes | bytearray | memoryview | None = None,
) -> int:
    """Run one operation and return 0 on success or -1 on any failure."""
    return client_operation(conn, opcode, block).code
