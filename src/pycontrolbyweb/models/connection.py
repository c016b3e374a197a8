"""
Connection models.

Classes:
    Endpoint: Immutable address of one module plus its auth settings
    ConnectionState: Enumeration of connection states
    ConnectionStatus: Current status of a connection
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pycontrolbyweb.models.common import DEFAULT_PORT


@dataclass(frozen=True)
class Endpoint:
    """
    Network location of a module.

    An endpoint never changes while a request is in flight; to point a
    controller somewhere else, build a new one with with_address() or
    with_port() and assign it between requests.

    Attributes:
        address: Host name or IP address of the module
        port: TCP port of the module's web server (default: 80)
        auth_enabled: Whether commands carry a Basic Authorization header
        credential_ref: Opaque key passed to the credential provider

    Example:
        >>> endpoint = Endpoint("192.168.1.2", auth_enabled=True, credential_ref="garage")
        >>> valid, errors = endpoint.validate()
    """

    address: Optional[str]
    port: int = DEFAULT_PORT
    auth_enabled: bool = False
    credential_ref: Optional[str] = None

    def with_address(self, address: str) -> "Endpoint":
        return replace(self, address=address)

    def with_port(self, port: int) -> "Endpoint":
        return replace(self, port=port)

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate the endpoint.

        Returns:
            Tuple of (is_valid, list_of_error_messages)
        """
        errors = []

        if not self.address or not str(self.address).strip():
            errors.append("Module address is not set")

        if not isinstance(self.port, int) or isinstance(self.port, bool):
            errors.append(f"Port must be an integer: {self.port!r}")
        elif not (1 <= self.port <= 65535):
            errors.append(f"Port out of range (1-65535): {self.port}")

        if self.auth_enabled and not self.credential_ref:
            errors.append("Authentication is enabled but no credential is configured")

        return (len(errors) == 0, errors)

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


class ConnectionState(Enum):
    """
    Enumeration of possible connection states.

    States:
        DISCONNECTED: No socket is open
        CONNECTING: Connection attempt in progress
        CONNECTED: Socket is open to the module
        ERROR: The last connection attempt failed
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class ConnectionStatus:
    """
    Current status of a connection.

    Attributes:
        state: Current connection state
        address: Module address if connected, None otherwise
        port: Port number if connected, None otherwise
        connected_at: Timestamp when connection was established
        last_error: Last error message if state is ERROR
    """

    state: ConnectionState
    address: Optional[str] = None
    port: Optional[int] = None
    connected_at: Optional[datetime] = None
    last_error: Optional[str] = None
