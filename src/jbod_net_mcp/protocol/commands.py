"""JBOD command identifiers, opcode layout and opcode builders.

Opcode layout (32 bits, sent big-endian)::

    +-----------+---------+---------+----------+
    | Reserved  | Command | Disk ID | Block ID |
    | 31..18    | 17..12  | 11..8   | 7..0     |
    +-----------+---------+---------+----------+

The protocol layer only cares about the command field; the disk and block
operands are meaningful to the server's storage backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

JBOD_SERVER = "127.0.0.1"
JBOD_PORT = 3333

JBOD_NUM_DISKS = 16
JBOD_NUM_BLOCKS_PER_DISK = 256

COMMAND_SHIFT = 12
COMMAND_MASK = 0x3F
DISK_SHIFT = 8
DISK_MASK = 0x0F
BLOCK_MASK = 0xFF


class JbodCommand(IntEnum):
    """Command selectors carried in bits 12-17 of an opcode."""

    MOUNT = 0
    UNMOUNT = 1
    SEEK_TO_DISK = 2
    SEEK_TO_BLOCK = 3
    READ_BLOCK = 4
    WRITE_BLOCK = 5


def command_field(opcode: int) -> int:
    """Extract the 6-bit command field from a raw opcode."""
    return (opcode >> COMMAND_SHIFT) & COMMAND_MASK


@dataclass(frozen=True)
class Opcode:
    """A decoded opcode.

    ``command`` is kept as a plain int so that selectors outside
    :class:`JbodCommand` still survive a decode/encode cycle.
    """

    command: int
    disk_id: int = 0
    block_id: int = 0

    @classmethod
    def from_int(cls, value: int) -> Opcode:
        return cls(
            command=command_field(value),
            disk_id=(value >> DISK_SHIFT) & DISK_MASK,
            block_id=value & BLOCK_MASK,
        )

    def to_int(self) -> int:
        return (
            (self.command & COMMAND_MASK) << COMMAND_SHIFT
            | (self.disk_id & DISK_MASK) << DISK_SHIFT
            | (self.block_id & BLOCK_MASK)
        )

    @property
    def is_write(self) -> bool:
        return self.command == JbodCommand.WRITE_BLOCK

    def __repr__(self) -> str:
        try:
            name = JbodCommand(self.command).name
        except ValueError:
            name = f"0x{self.command:02X}"
        return f"Opcode({name}, disk_id={self.disk_id}, block_id={self.block_id})"


def build_opcode(command: JbodCommand, disk_id: int = 0, block_id: int = 0) -> int:
    """Pack a command and its operands into a raw 32-bit opcode.

    Args:
        command: Command selector.
        disk_id: Disk index 0-15 (used by SEEK_TO_DISK).
        block_id: Block index 0-255 (used by SEEK_TO_BLOCK).
    """
    if not 0 <= command <= COMMAND_MASK:
        raise ValueError(f"Command must be 0-{COMMAND_MASK}, got {command}")
    if not 0 <= disk_id < JBOD_NUM_DISKS:
        raise ValueError(f"Disk id must be 0-{JBOD_NUM_DISKS - 1}, got {disk_id}")
    if not 0 <= block_id < JBOD_NUM_BLOCKS_PER_DISK:
        raise ValueError(
            f"Block id must be 0-{JBOD_NUM_BLOCKS_PER_DISK - 1}, got {block_id}"
        )
    return Opcode(int(command), disk_id, block_id).to_int()


def build_mount() -> int:
    """Build a MOUNT opcode."""
    return build_opcode(JbodCommand.MOUNT)


def build_unmount() -> int:
    """Build an UNMOUNT opcode."""
    return build_opcode(JbodCommand.UNMOUNT)


def build_seek_to_disk(disk_id: int) -> int:
    """Build a SEEK_TO_DISK opcode for a disk index 0-15."""
    return build_opcode(JbodCommand.SEEK_TO_DISK, disk_id=disk_id)


def build_seek_to_block(block_id: int) -> int:
    """Build a SEEK_TO_BLOCK opcode for a block index 0-255."""
    return build_opcode(JbodCommand.SEEK_TO_BLOCK, block_id=block_id)


def build_read_block() -> int:
    """Build a READ_BLOCK opcode for the current position."""
    return build_opcode(JbodCommand.READ_BLOCK)


def build_write_block() -> int:
    """Build a WRITE_BLOCK opcode for the current position."""
    return build_opcode(JbodCommand.WRITE_BLOCK)
