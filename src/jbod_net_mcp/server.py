"""MCP server entry point for a remote JBOD storage server.

Exposes connection and block-level tools via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .client import OperationResult, client_operation
from .protocol.commands import (
    JBOD_NUM_BLOCKS_PER_DISK,
    JBOD_NUM_DISKS,
    JBOD_PORT,
    JBOD_SERVER,
    Opcode,
    build_mount,
    build_read_block,
    build_seek_to_block,
    build_seek_to_disk,
    build_unmount,
    build_write_block,
)
from .protocol.framing import JBOD_BLOCK_SIZE, Status
from .transport.tcp_connection import JbodConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "jbod-net",
    instructions="MCP server for block-level access to a remote JBOD storage server",
)

# Global connection state
_connection: JbodConnection | None = None


def _get_connection() -> JbodConnection:
    """Get the active server connection, raising if not connected."""
    if _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to a JBOD server. Use the 'connect' tool first."
        )
    return _connection


def _result(result: OperationResult, **extra: Any) -> dict[str, Any]:
    out: dict[str, Any] = {"ok": result.ok}
    if result.opcode is not None:
        out["opcode"] = result.opcode
        out["status"] = result.status
    if not result.ok:
        out["error"] = str(result.error) if result.error else "Operation failed"
    out.update(extra)
    return out


def _parse_block_hex(data_hex: str) -> bytes | None:
    try:
        data = bytes.fromhex(data_hex)
    except ValueError:
        return None
    return data if len(data) == JBOD_BLOCK_SIZE else None


def _run(opcode: int, block: bytes | bytearray | None = None) -> OperationResult:
    return client_operation(_get_connection(), opcode, block)


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(host: str = JBOD_SERVER, port: int = JBOD_PORT) -> dict[str, Any]:
    """Open a TCP connection to a JBOD server.

    Args:
        host: Numeric IPv4 or IPv6 address of the server.
        port: Server TCP port.
    """
    global _connection
    if _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "server": str(_connection.server),
        }

    _connection = JbodConnection(host, port)
    info = _connection.open()
    return {"connected": True, "server": str(info)}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the connection to the JBOD server."""
    global _connection
    if _connection is None:
        return {"disconnected": True}
    _connection.close()
    _connection = None
    return {"disconnected": True}


# ─── DEVICE TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def mount() -> dict[str, Any]:
    """Mount the disks on the server. Must precede any other device operation."""
    return _result(_run(build_mount()))


@mcp.tool()
def unmount() -> dict[str, Any]:
    """Unmount the disks on the server."""
    return _result(_run(build_unmount()))


@mcp.tool()
def seek_to_disk(disk_id: int) -> dict[str, Any]:
    """Move the server's current position to the start of a disk.

    Args:
        disk_id: Disk index (0-15).
    """
    if not 0 <= disk_id < JBOD_NUM_DISKS:
        return {"error": f"Disk id must be 0-{JBOD_NUM_DISKS - 1}"}
    return _result(_run(build_seek_to_disk(disk_id)), disk_id=disk_id)


@mcp.tool()
def seek_to_block(block_id: int) -> dict[str, Any]:
    """Move the server's current position to a block on the current disk.

    Args:
        block_id: Block index (0-255).
    """
    if not 0 <= block_id < JBOD_NUM_BLOCKS_PER_DISK:
        return {"error": f"Block id must be 0-{JBOD_NUM_BLOCKS_PER_DISK - 1}"}
    return _result(_run(build_seek_to_block(block_id)), block_id=block_id)


# ─── BLOCK I/O TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def read_block() -> dict[str, Any]:
    """Read the 256-byte block at the current position, returned as hex."""
    block = bytearray(JBOD_BLOCK_SIZE)
    result = _run(build_read_block(), block)
    if not result.ok:
        return _result(result)
    return _result(result, data_hex=block.hex())


@mcp.tool()
def write_block(data_hex: str) -> dict[str, Any]:
    """Write a 256-byte block at the current position.

    Args:
        data_hex: Exactly 256 bytes, hex-encoded (512 hex digits).
    """
    data = _parse_block_hex(data_hex)
    if data is None:
        return {"error": f"data_hex must encode exactly {JBOD_BLOCK_SIZE} bytes"}
    return _result(_run(build_write_block(), data))


@mcp.tool()
def read_block_at(disk_id: int, block_id: int) -> dict[str, Any]:
    """Seek to a disk and block, then read it.

    Args:
        disk_id: Disk index (0-15).
        block_id: Block index (0-255).
    """
    for step in (seek_to_disk(disk_id), seek_to_block(block_id)):
        if not step.get("ok"):
            return step
    result = read_block()
    result.update(disk_id=disk_id, block_id=block_id)
    return result


@mcp.tool()
def write_block_at(disk_id: int, block_id: int, data_hex: str) -> dict[str, Any]:
    """Seek to a disk and block, then overwrite it.

    Args:
        disk_id: Disk index (0-15).
        block_id: Block index (0-255).
        data_hex: Exactly 256 bytes, hex-encoded.
    """
    if _parse_block_hex(data_hex) is None:
        return {"error": f"data_hex must encode exactly {JBOD_BLOCK_SIZE} bytes"}
    for step in (seek_to_disk(disk_id), seek_to_block(block_id)):
        if not step.get("ok"):
            return step
    result = write_block(data_hex)
    result.update(disk_id=disk_id, block_id=block_id)
    return result


@mcp.tool()
def raw_operation(opcode: int, data_hex: str | None = None) -> dict[str, Any]:
    """Send an arbitrary opcode to the server.

    Args:
        opcode: Raw 32-bit opcode (command in bits 12-17).
        data_hex: Block to send for WRITE_BLOCK, hex-encoded 256 bytes.
    """
    if not 0 <= opcode <= 0xFFFFFFFF:
        return {"error": "Opcode must be a 32-bit unsigned value"}

    decoded = Opcode.from_int(opcode)
    if decoded.is_write:
        data = _parse_block_hex(data_hex or "")
        if data is None:
            return {"error": f"data_hex must encode exactly {JBOD_BLOCK_SIZE} bytes"}
        return _result(_run(opcode, data), request=repr(decoded))

    block = bytearray(JBOD_BLOCK_SIZE)
    result = _run(opcode, block)
    extra: dict[str, Any] = {"request": repr(decoded)}
    if result.ok and result.status is not None and result.status & Status.PAYLOAD:
        extra["data_hex"] = block.hex()
    return _result(result, **extra)


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
