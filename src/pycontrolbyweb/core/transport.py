"""
Command transport.

Sends one textual command to a module and turns the single-read reply
into an XML element. Every command opens its own connection and closes
it after reading, so no socket outlives a call.

Known limitation: the protocol has no framing, and the transport reads
exactly once. A reply larger than receive_buffer_size is truncated and
will normally surface as a BadResponseError.
"""

import logging
import re
import threading
import xml.etree.ElementTree as ElementTree
from typing import Callable, Optional

from pycontrolbyweb.core.errors import (
    ConnectionFailedError,
    ErrorCodes,
    IllegalStateError,
    InvalidArgumentError,
    UnauthorizedError,
)
from pycontrolbyweb.core.tcp_connection import TCPConnection
from pycontrolbyweb.core.xml_decoder import decode_document
from pycontrolbyweb.models.common import DEFAULT_RECEIVE_BUFFER_SIZE, UNAUTHORIZED_MARKER
from pycontrolbyweb.models.connection import Endpoint

logger = logging.getLogger(__name__)

_AUTH_HEADER = re.compile(r"(Authorization: Basic )\S+")


def trim_response(text: str) -> str:
    """Drop trailing NUL padding, then surrounding whitespace."""
    return text.rstrip("\0").strip()


def mask_credentials(command: str) -> str:
    """Hide the Basic auth token so commands can be logged."""
    return _AUTH_HEADER.sub(r"\1****", command)


class CommandTransport:
    """
    Request/response channel to one module.

    Args:
        endpoint: Module to talk to
        receive_buffer_size: Size of the single read performed per command
        connection_factory: Callable building a connection for an endpoint
    """

    def __init__(
        self,
        endpoint: Endpoint,
        receive_buffer_size: int = DEFAULT_RECEIVE_BUFFER_SIZE,
        connection_factory: Callable[[Endpoint], TCPConnection] = TCPConnection,
    ):
        if not isinstance(receive_buffer_size, int) or receive_buffer_size <= 0:
            raise InvalidArgumentError(
                f"Receive buffer size must be a positive integer, got {receive_buffer_size!r}",
                argument="receive_buffer_size",
            )
        self.endpoint = endpoint
        self.receive_buffer_size = receive_buffer_size
        self._connection_factory = connection_factory
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Dispose the transport; later commands raise IllegalStateError."""
        with self._lock:
            self._closed = True

    def send_command(self, command: str) -> Optional[ElementTree.Element]:
        """
        Send a command and decode the reply.

        Returns:
            Root element of the reply, or None when the module sent nothing
            back (a "no reply" command)

        Raises:
            IllegalStateError: If the transport has been closed
            InvalidArgumentError: If the command is empty or not ASCII
            ConfigurationError: If the endpoint has no address
            TransportError: On socket failures (ConnectionFailedError, DeviceIOError)
            UnauthorizedError: If the module rejected the credentials
            BadResponseError: If the reply is not valid XML
        """
        text = self.send_command_raw(command)
        if text is None:
            return None
        return decode_document(text)

    def send_command_raw(self, command: str) -> Optional[str]:
        """
        Send a command and return the trimmed reply text without parsing it.

        Raises the same errors as send_command() except BadResponseError.
        """
        if self._closed:
            raise IllegalStateError(
                "Transport has been closed",
                error_code=ErrorCodes.DISPOSED,
            )
        if not command or not command.strip():
            raise InvalidArgumentError("Command must not be empty", argument="command")
        if not command.isascii():
            raise InvalidArgumentError("Command must be ASCII text", argument="command")

        raw = self._exchange(command)
        if not raw:
            logger.debug("Empty reply (no-reply command)")
            return None

        text = raw.decode("ascii", errors="replace")
        if UNAUTHORIZED_MARKER in text:
            logger.warning(f"Module at {self.endpoint} rejected credentials")
            raise UnauthorizedError(
                context={'address': self.endpoint.address, 'port': self.endpoint.port}
            )
        return trim_response(text)

    def _exchange(self, command: str) -> bytes:
        connection = self._connection_factory(self.endpoint)
        connection.connect()
        try:
            if not connection.is_connected():
                raise ConnectionFailedError(self.endpoint.address, self.endpoint.port)
            logger.debug(f"-> {self.endpoint}: {mask_credentials(command)!r}")
            connection.send_bytes(command.encode("ascii"))
            return connection.receive_bytes(self.receive_buffer_size)
        finally:
            connection.disconnect()

    def __enter__(self) -> "CommandTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
