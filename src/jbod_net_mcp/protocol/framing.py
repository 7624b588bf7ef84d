"""Packet builder and header parser for the JBOD wire protocol.

Packet layout::

    +---------+---------+--------------------+
    | Opcode  | Status  |       Block        |
    | 4 bytes | 1 byte  | 256 bytes, if any  |
    +---------+---------+--------------------+

- Opcode: big-endian 32-bit opcode, see :mod:`.commands`
- Status: bit 0 = server reported an error, bit 1 = a block follows
- Block: present in requests only for WRITE_BLOCK, and in responses only
  when the payload flag is set and the error flag is clear

No length field exists; the header alone decides how long a message is.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntFlag

from ..errors import ProtocolError
from .commands import JbodCommand, Opcode, command_field

HEADER_FMT = "!IB"
HEADER_LEN = struct.calcsize(HEADER_FMT)  # 5
JBOD_BLOCK_SIZE = 256


class Status(IntFlag):
    """Bit flags carried in the header status byte."""

    NONE = 0x00
    ERROR = 0x01
    PAYLOAD = 0x02


@dataclass
class Header:
    """A parsed packet header.

    ``payload`` holds the block that followed the header, if any.
    """

    opcode: int
    status: int
    payload: bytes | None = None

    @property
    def error(self) -> bool:
        return bool(self.status & Status.ERROR)

    @property
    def has_payload(self) -> bool:
        # The error flag wins: error responses never carry a block.
        return not self.error and bool(self.status & Status.PAYLOAD)

    def __repr__(self) -> str:
        return (
            f"Header(opcode=0x{self.opcode:08X}, status=0x{self.status:02X})"
        )


def encode_request(opcode: int | Opcode, block: bytes | None = None) -> bytes:
    """Serialize a request packet.

    Args:
        opcode: Raw 32-bit opcode or a decoded :class:`Opcode`.
        block: The 256-byte block to write. Only used for WRITE_BLOCK;
            ignored for every other command.

    Returns:
        ``HEADER_LEN + 256`` bytes for WRITE_BLOCK, ``HEADER_LEN`` otherwise.

    Raises:
        ProtocolError: If a WRITE_BLOCK request is missing its block or the
            block is not exactly ``JBOD_BLOCK_SIZE`` bytes.
    """
    raw = opcode.to_int() if isinstance(opcode, Opcode) else opcode & 0xFFFFFFFF

    if command_field(raw) != JbodCommand.WRITE_BLOCK:
        return struct.pack(HEADER_FMT, raw, Status.NONE)

    if block is None:
        raise ProtocolError("WRITE_BLOCK request requires a block")
    if len(block) != JBOD_BLOCK_SIZE:
        raise ProtocolError(
            f"Block must be {JBOD_BLOCK_SIZE} bytes, got {len(block)}"
        )
    return struct.pack(HEADER_FMT, raw, Status.PAYLOAD) + bytes(block)


def decode_header(data: bytes) -> Header:
    """Parse a response header.

    Raises:
        ProtocolError: If fewer than ``HEADER_LEN`` bytes are given, or the
            status byte has the error flag set. The payload flag is not
            consulted in that case.
    """
    if len(data) < HEADER_LEN:
        raise ProtocolError(
            f"Header must be {HEADER_LEN} bytes, got {len(data)}"
        )

    opcode, status = struct.unpack(HEADER_FMT, bytes(data[:HEADER_LEN]))
    header = Header(opcode=opcode, status=status)
    if header.error:
        raise ProtocolError(
            f"Server reported failure for {Opcode.from_int(opcode)!r} "
            f"(status=0x{status:02X})",
            header=header,
        )
    return header
