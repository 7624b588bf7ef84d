"""Shared fixtures: a scripted fake socket and a loopback JBOD server."""

from __future__ import annotations

import socket
import struct
import threading

import pytest

from jbod_net_mcp.transport.tcp_connection import JbodConnection


class ChunkedSocket:
    """Socket stand-in that moves at most ``chunk`` bytes per call.

    ``incoming`` is what ``recv`` hands out; everything passed to ``send``
    is collected in ``sent``.
    """

    def __init__(self, incoming: bytes = b"", chunk: int = 4096) -> None:
        self.incoming = bytearray(incoming)
        self.chunk = chunk
        self.sent = bytearray()
        self.bytes_read = 0
        self.recv_calls = 0
        self.send_calls = 0

    def recv(self, n: int) -> bytes:
        self.recv_calls += 1
        size = min(n, self.chunk, len(self.incoming))
        data = bytes(self.incoming[:size])
        del self.incoming[:size]
        self.bytes_read += size
        return data

    def send(self, data) -> int:
        self.send_calls += 1
        size = min(len(data), self.chunk)
        self.sent += bytes(data[:size])
        return size

    def close(self) -> None:
        pass


def make_connection(fake: ChunkedSocket) -> JbodConnection:
    """Return a JbodConnection wired to ``fake`` instead of a real socket."""
    conn = JbodConnection()
    conn._sock = fake
    return conn


def response(opcode: int, status: int, block: bytes = b"") -> bytes:
    return struct.pack("!IB", opcode, status) + block


@pytest.fixture
def loopback_server():
    """Start a one-shot TCP server on 127.0.0.1 driven by a handler.

    Yields a ``start(handler)`` function returning the bound port. The
    handler receives the accepted socket.
    """
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    threads: list[threading.Thread] = []

    def start(handler) -> int:
        def serve():
            client, _ = listener.accept()
            with client:
                handler(client)

        t = threading.Thread(target=serve, daemon=True)
        t.start()
        threads.append(t)
        return listener.getsockname()[1]

    yield start

    for t in threads:
        t.join(timeout=5)
    listener.close()
