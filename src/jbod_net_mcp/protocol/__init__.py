"""Protocol layer: packet framing, status flags, and opcode builders."""

from .framing import HEADER_LEN, JBOD_BLOCK_SIZE, Header, Status, decode_header, encode_request
from .commands import JbodCommand, Opcode, build_opcode
