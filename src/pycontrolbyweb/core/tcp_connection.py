"""
TCP connection management for ControlByWeb modules.

Owns a single socket to one module endpoint. The protocol is
connect-per-command, so a TCPConnection normally lives only for the
duration of one request: the transport opens it, writes a command,
reads a response and closes it again.
"""

import socket
import logging
import threading
from datetime import datetime
from typing import Optional, Tuple

from pycontrolbyweb.core.errors import (
    ConfigurationError,
    DeviceIOError,
    ErrorCodes,
    TransportError,
)
from pycontrolbyweb.models.connection import ConnectionState, ConnectionStatus, Endpoint


class TCPConnection:
    """
    Manages a TCP socket to one ControlByWeb module.

    All socket access is guarded by an instance lock. The socket uses the
    operating system's default timeouts unless connect_timeout is given.

    Example:
        >>> connection = TCPConnection(Endpoint("192.168.1.2"))
        >>> connection.connect()
        >>> connection.send_bytes(b"GET /state.xml?noReply=0 HTTP/1.1\\r\\n\\r\\n")
        >>> response = connection.receive_bytes(8192)
        >>> connection.disconnect()
    """

    def __init__(self, endpoint: Endpoint, connect_timeout: Optional[float] = None):
        """
        Initialize connection manager.

        Args:
            endpoint: Module to connect to
            connect_timeout: Optional connect timeout in seconds (None = OS default)
        """
        self._endpoint = endpoint
        self._connect_timeout = connect_timeout
        self._socket: Optional[socket.socket] = None
        self._lock = threading.Lock()
        self._status = ConnectionStatus(state=ConnectionState.DISCONNECTED)
        self.logger = logging.getLogger(__name__)

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def state(self) -> ConnectionState:
        return self._status.state

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    def is_connected(self) -> bool:
        return self._status.state == ConnectionState.CONNECTED and self._socket is not None

    def get_connection_info(self) -> Tuple[Optional[str], Optional[int]]:
        """Return (address, port) while connected, (None, None) otherwise."""
        return self._status.address, self._status.port

    def connect(self) -> None:
        """
        Open the socket to the endpoint.

        Any previously open socket is closed first. Calling connect() while
        already connected is a no-op.

        Raises:
            ConfigurationError: If no address is set or the port is invalid
            TransportError: On any socket-level failure
        """
        with self._lock:
            address = self._endpoint.address
            port = self._endpoint.port
            self._validate_endpoint(address, port)

            if self.is_connected():
                self.logger.debug(f"Already connected to {address}:{port}")
                return

            if self._socket is not None:
                self.logger.debug("Discarding stale socket before reconnecting")
                self._disconnect_unsafe()

            self._status = ConnectionStatus(state=ConnectionState.CONNECTING, address=address, port=port)
            try:
                self.logger.debug(f"Connecting to {address}:{port}")
                self._socket = socket.create_connection((address, port), timeout=self._connect_timeout)
            except OSError as e:
                self.logger.error(f"Connection to {address}:{port} failed: {e}")
                self._disconnect_unsafe()
                self._status = ConnectionStatus(
                    state=ConnectionState.ERROR,
                    address=address,
                    port=port,
                    last_error=str(e),
                )
                raise TransportError(
                    f"Could not connect to module at {address}:{port}",
                    address=address,
                    port=port,
                    cause=e,
                    error_code=ErrorCodes.TRANSPORT_FAILURE,
                    suggestions=["Check that the module is powered and reachable on the network"],
                ) from e

            self._status = ConnectionStatus(
                state=ConnectionState.CONNECTED,
                address=address,
                port=port,
                connected_at=datetime.now(),
            )
            self.logger.debug(f"Connected to {address}:{port}")

    def disconnect(self) -> None:
        """
        Close the socket.

        Safe to call any number of times; never raises.
        """
        with self._lock:
            self._disconnect_unsafe()

    def _disconnect_unsafe(self) -> None:
        """Disconnect without taking the lock (caller must hold it)."""
        if self._socket is not None:
            try:
                self._socket.close()
                self.logger.debug("Closed module socket")
            except OSError as e:
                self.logger.error(f"Error closing module socket: {e}")
            finally:
                self._socket = None
        self._status = ConnectionStatus(state=ConnectionState.DISCONNECTED)

    def send_bytes(self, data: bytes) -> None:
        """
        Write all bytes to the socket.

        Raises:
            DeviceIOError: If not connected or the write fails
        """
        with self._lock:
            if self._socket is None or self._status.state != ConnectionState.CONNECTED:
                raise DeviceIOError(
                    "Cannot write command: socket is not connected",
                    address=self._endpoint.address,
                    port=self._endpoint.port,
                )
            try:
                self._socket.sendall(data)
                self.logger.debug(f"Sent {len(data)} bytes")
            except OSError as e:
                self.logger.error(f"Failed to send data: {e}")
                raise DeviceIOError(
                    "Failed to write command to module",
                    address=self._endpoint.address,
                    port=self._endpoint.port,
                    cause=e,
                ) from e

    def receive_bytes(self, size: int) -> bytes:
        """
        Perform a single read of up to size bytes.

        Returns:
            Bytes received (empty when the module closed without replying)

        Raises:
            ValueError: If size is not a positive integer
            DeviceIOError: If not connected or the read fails
        """
        if not isinstance(size, int) or size <= 0:
            raise ValueError(f"Size must be positive integer, got {size}")

        with self._lock:
            if self._socket is None or self._status.state != ConnectionState.CONNECTED:
                raise DeviceIOError(
                    "Cannot read response: socket is not connected",
                    address=self._endpoint.address,
                    port=self._endpoint.port,
                )
            try:
                data = self._socket.recv(size)
            except OSError as e:
                self.logger.error(f"Failed to receive data: {e}")
                raise DeviceIOError(
                    "Failed to read response from module",
                    address=self._endpoint.address,
                    port=self._endpoint.port,
                    cause=e,
                ) from e
            self.logger.debug(f"Received {len(data)} bytes")
            return data

    @staticmethod
    def _validate_endpoint(address: Optional[str], port: int) -> None:
        if not address or not str(address).strip():
            raise ConfigurationError(
                "Module address is not set",
                setting_name="address",
                error_code=ErrorCodes.MISSING_ADDRESS,
            )
        if not isinstance(port, int) or isinstance(port, bool) or not (1 <= port <= 65535):
            raise ConfigurationError(
                f"Port must be an integer between 1 and 65535, got {port!r}",
                setting_name="port",
            )

    def __enter__(self) -> "TCPConnection":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()
