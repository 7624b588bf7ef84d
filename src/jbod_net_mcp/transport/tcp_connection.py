"""TCP connection to a JBOD server.

One :class:`JbodConnection` owns one stream socket. The protocol has no
request identifier, so a connection carries exactly one request at a time;
callers sharing a connection across threads must serialize access themselves.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass

from ..errors import JbodConnectionError, ProtocolError
from ..protocol.commands import JBOD_PORT, JBOD_SERVER, Opcode
from ..protocol.framing import HEADER_LEN, JBOD_BLOCK_SIZE, Header, decode_header, encode_request
from .stream_io import reliable_read, reliable_write

logger = logging.getLogger(__name__)


@dataclass
class ServerInfo:
    """Address of the connected server."""

    host: str = JBOD_SERVER
    port: int = JBOD_PORT

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class JbodConnection:
    """Manages the stream connection to a JBOD server.

    Usage::

        conn = JbodConnection("127.0.0.1", 3333)
        conn.open()
        conn.send_packet(opcode, block)
        header = conn.recv_packet(block)
        conn.close()
    """

    def __init__(self, host: str = JBOD_SERVER, port: int = JBOD_PORT) -> None:
        self._server = ServerInfo(host=host, port=port)
        self._sock: socket.socket | None = None

    @property
    def connected(self) -> bool:
        return self._sock is not None

    @property
    def server(self) -> ServerInfo:
        return self._server

    def __enter__(self) -> JbodConnection:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def open(self) -> ServerInfo:
        """Resolve the server address and connect to it.

        Only numeric IPv4 or IPv6 addresses are accepted; no name lookup is
        performed.

        Raises:
            JbodConnectionError: If already connected, the address is not a
                valid numeric address, or the socket cannot be created or
                connected.
        """
        if self._sock is not None:
            raise JbodConnectionError(f"Already connected to {self._server}")

        host, port = self._server.host, self._server.port
        try:
            family, socktype, proto, _, sockaddr = socket.getaddrinfo(
                host, port, type=socket.SOCK_STREAM, flags=socket.AI_NUMERICHOST
            )[0]
        except (socket.gaierror, OverflowError, UnicodeError) as e:
            raise JbodConnectionError(f"Invalid server address {host!r}: {e}") from e

        try:
            sock = socket.socket(family, socktype, proto)
        except OSError as e:
            raise JbodConnectionError(f"Could not create socket: {e}") from e

        try:
            sock.connect(sockaddr)
        except OSError as e:
            sock.close()
            raise JbodConnectionError(
                f"Could not connect to JBOD server at {self._server}: {e}"
            ) from e

        self._sock = sock
        logger.info("Connected to JBOD server at %s", self._server)
        return self._server

    def close(self) -> None:
        """Close the connection. Does nothing if already closed."""
        if self._sock is None:
            return

        try:
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing socket: %s", e)
        finally:
            self._sock = None
            logger.info("Disconnected from %s", self._server)

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise JbodConnectionError("Not connected to JBOD server")
        return self._sock

    def send_packet(self, opcode: int | Opcode, block: bytes | None = None) -> None:
        """Encode and send one request packet.

        Raises:
            JbodConnectionError: If not connected.
            ProtocolError: If a WRITE_BLOCK block is missing or mis-sized.
            TransportError: If the write fails.
        """
        sock = self._require_socket()
        packet = encode_request(opcode, block)
        logger.debug("Sending %d-byte request, opcode=%r", len(packet), opcode)
        reliable_write(sock, packet)

    def recv_packet(
        self, block: bytes | bytearray | memoryview | None = None
    ) -> Header:
        """Receive one response packet.

        The header is read first. A 256-byte block is read afterwards only
        when the header says one follows; it is kept on ``Header.payload``
        and also copied into ``block`` when ``block`` is writable. A
        read-only or missing ``block`` (such as the bytes of a WRITE_BLOCK
        request) is left untouched.

        Raises:
            JbodConnectionError: If not connected.
            ProtocolError: If the server flagged an error, or a block arrived
                and ``block`` is writable but cannot hold it.
            TransportError: If a read fails.
        """
        sock = self._require_socket()
        header = decode_header(reliable_read(sock, HEADER_LEN))
        logger.debug("Received %r", header)

        if not header.has_payload:
            return header

        header.payload = reliable_read(sock, JBOD_BLOCK_SIZE)
        if block is None:
            return header
        try:
            view = memoryview(block)
        except TypeError as e:
            raise ProtocolError(f"Block buffer is not a buffer: {e}", header) from e
        if view.readonly:
            return header
        if not view.c_contiguous or view.nbytes < JBOD_BLOCK_SIZE:
            raise ProtocolError(
                f"Block buffer must be contiguous and hold {JBOD_BLOCK_SIZE} bytes",
                header,
            )
        view.cast("B")[:JBOD_BLOCK_SIZE] = header.payload
        return header
