"""Stream transport: whole-buffer socket I/O and the connection handle."""

from .stream_io import reliable_read, reliable_write
from .tcp_connection import JbodConnection
