"""Tests for opcode layout and builders."""

import pytest

from jbod_net_mcp.protocol.commands import (
    JbodCommand,
    Opcode,
    build_mount,
    build_opcode,
    build_read_block,
    build_seek_to_block,
    build_seek_to_disk,
    build_unmount,
    build_write_block,
    command_field,
)


def test_command_enum_values():
    assert JbodCommand.MOUNT == 0
    assert JbodCommand.UNMOUNT == 1
    assert JbodCommand.SEEK_TO_DISK == 2
    assert JbodCommand.SEEK_TO_BLOCK == 3
    assert JbodCommand.READ_BLOCK == 4
    assert JbodCommand.WRITE_BLOCK == 5


def test_command_field_bits_12_to_17():
    assert command_field(JbodCommand.WRITE_BLOCK << 12) == JbodCommand.WRITE_BLOCK
    # Bits outside 12-17 must not leak into the command field
    assert command_field(0xFFFC0FFF) == 0
    assert command_field(0x0003F000) == 0x3F


def test_build_seek_to_disk_packs_disk_id():
    op = build_seek_to_disk(7)
    assert op == (2 << 12) | (7 << 8)
    decoded = Opcode.from_int(op)
    assert decoded.command == JbodCommand.SEEK_TO_DISK
    assert decoded.disk_id == 7
    assert decoded.block_id == 0


def test_build_seek_to_block_packs_block_id():
    op = build_seek_to_block(200)
    assert op == (3 << 12) | 200
    assert Opcode.from_int(op).block_id == 200


def test_simple_builders():
    assert build_mount() == 0
    assert command_field(build_unmount()) == JbodCommand.UNMOUNT
    assert command_field(build_read_block()) == JbodCommand.READ_BLOCK
    assert command_field(build_write_block()) == JbodCommand.WRITE_BLOCK


def test_disk_bounds():
    with pytest.raises(ValueError):
        build_seek_to_disk(16)
    with pytest.raises(ValueError):
        build_seek_to_disk(-1)


def test_block_bounds():
    with pytest.raises(ValueError):
        build_seek_to_block(256)


def test_opcode_is_write():
    assert Opcode(JbodCommand.WRITE_BLOCK).is_write
    assert not Opcode(JbodCommand.READ_BLOCK).is_write


def test_opcode_repr_unknown_command():
    r = repr(Opcode(command=0x30))
    assert "0x30" in r
    assert "SEEK_TO_DISK" in repr(Opcode(JbodCommand.SEEK_TO_DISK, disk_id=1))
