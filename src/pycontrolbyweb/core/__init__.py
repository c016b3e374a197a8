"""
Protocol core: connection, transport, XML decoding, command building,
polling and the error hierarchy.
"""

from pycontrolbyweb.core.errors import (
    BadResponseError,
    ConfigurationError,
    ConnectionFailedError,
    ControlByWebError,
    DeviceIOError,
    ErrorCodes,
    IllegalStateError,
    InvalidArgumentError,
    PollError,
    RangeError,
    TransportError,
    UnauthorizedError,
    UnsupportedMethodError,
)
from pycontrolbyweb.core.tcp_connection import TCPConnection
from pycontrolbyweb.core.transport import CommandTransport, trim_response
from pycontrolbyweb.core.xml_decoder import decode_document, get_named_child
from pycontrolbyweb.core.commands import CommandBuilder, validate_pulse_time
from pycontrolbyweb.core.poller import PollLoop

__all__ = [
    "ControlByWebError",
    "ConfigurationError",
    "TransportError",
    "ConnectionFailedError",
    "DeviceIOError",
    "UnauthorizedError",
    "BadResponseError",
    "InvalidArgumentError",
    "RangeError",
    "IllegalStateError",
    "UnsupportedMethodError",
    "PollError",
    "ErrorCodes",
    "TCPConnection",
    "CommandTransport",
    "trim_response",
    "decode_document",
    "get_named_child",
    "CommandBuilder",
    "validate_pulse_time",
    "PollLoop",
]
