"""Client for the JBOD block-device network protocol, with an MCP tool server."""

from .client import OperationResult, client_operation, connect, disconnect, perform
from .errors import JbodConnectionError, JbodError, ProtocolError, TransportError
