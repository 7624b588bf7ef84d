"""Exceptions raised by the transport, codec and connection layers."""

from __future__ import annotations

from typing import Any


class JbodError(Exception):
    """Base class for every failure in the JBOD network client."""


class TransportError(JbodError):
    """A read or write on the stream failed, or the peer closed mid-message."""


class ProtocolError(JbodError):
    """The server flagged an error, or a message broke the wire format.

    ``header`` holds the decoded response header when the failure came from
    the server's status byte, and is ``None`` otherwise.
    """

    def __init__(self, message: str, header: Any = None) -> None:
        super().__init__(message)
        self.header = header


class JbodConnectionError(JbodError, ConnectionError):
    """Address resolution, socket creation or connect failed, or no connection is open."""
