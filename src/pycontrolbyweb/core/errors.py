"""
Error hierarchy for ControlByWeb module communication.

Every failure raised by this package derives from ControlByWebError and
carries a numeric code, a context dictionary and optional suggestions.

Error Code Ranges:
- 1000-1999: Connection / transport errors
- 2000-2999: Protocol / response errors
- 3000-3999: Device capability errors
- 5000-5999: State errors
- 6000-6999: Configuration errors
- 7000-7999: Validation / usage errors
- 9000-9999: Unknown/System errors
"""

from typing import Optional, Dict, Any, List
from datetime import datetime
import traceback


class ControlByWebError(Exception):
    """
    Base exception for all errors raised by the client library.

    Provides structured error information with context tracking.
    """

    DEFAULT_CODE = 9000
    CATEGORY: Optional[str] = None

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        suggestions: Optional[List[str]] = None
    ):
        """
        Initialize an error.

        Args:
            message: Human-readable error description
            error_code: Numeric error code for categorization
            context: Additional context information (WHERE)
            cause: Original exception if this wraps another error
            suggestions: List of possible solutions or next steps
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.DEFAULT_CODE
        self.context = dict(context) if context else {}
        self.cause = cause
        self.suggestions = suggestions or []
        self.timestamp = datetime.now()

        self.stack_trace = traceback.format_exc() if cause else None

        if self.CATEGORY:
            self.context['category'] = self.CATEGORY
        if cause:
            self.context['original_error'] = str(cause)
            self.context['original_type'] = type(cause).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'code': self.error_code,
            'context': self.context,
            'suggestions': self.suggestions,
            'timestamp': self.timestamp.isoformat(),
            'cause': str(self.cause) if self.cause else None,
            'stack_trace': self.stack_trace
        }

    def format_user_message(self) -> str:
        """Format error for user display (without technical details)."""
        msg = f"{self.message}"
        if self.suggestions:
            msg += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                msg += f"\n  {i}. {suggestion}"
        return msg

    def format_log_message(self) -> str:
        """Format error for logging (with all details)."""
        parts = [
            f"[{self.error_code}] {self.__class__.__name__}: {self.message}"
        ]
        if self.context:
            parts.append(f"Context: {self.context}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        if self.stack_trace:
            parts.append(f"Stack trace:\n{self.stack_trace}")
        return " | ".join(parts)


class ConfigurationError(ControlByWebError):
    """Missing or invalid configuration, such as an unset device address."""
    DEFAULT_CODE = 6001
    CATEGORY = 'CONFIGURATION'

    def __init__(self, message: str, setting_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if setting_name:
            self.context['setting'] = setting_name


class TransportError(ControlByWebError):
    """Socket-level failure while talking to a module."""
    DEFAULT_CODE = 1001
    CATEGORY = 'CONNECTION'

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        port: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.address = address
        self.port = port
        if address is not None:
            self.context['address'] = address
        if port is not None:
            self.context['port'] = port


class ConnectionFailedError(TransportError):
    """The socket never reached the connected state."""
    DEFAULT_CODE = 1002

    def __init__(self, address: Optional[str], port: Optional[int], message: Optional[str] = None, **kwargs):
        super().__init__(
            message or f"Failed to connect to module at {address}:{port}",
            address=address,
            port=port,
            **kwargs
        )


class DeviceIOError(TransportError):
    """The connected stream could not be written or read."""
    DEFAULT_CODE = 1003


class UnauthorizedError(ControlByWebError):
    """The module rejected the supplied credentials."""
    DEFAULT_CODE = 2001
    CATEGORY = 'AUTHORIZATION'

    def __init__(self, message: str = "Module rejected the supplied credentials", **kwargs):
        kwargs.setdefault('suggestions', [
            "Check the password configured for this module",
            "Verify that authentication is enabled on the module",
        ])
        super().__init__(message, **kwargs)


class BadResponseError(ControlByWebError):
    """The response could not be decoded as an XML document."""
    DEFAULT_CODE = 2002
    CATEGORY = 'PROTOCOL'

    def __init__(self, message: str, raw_text: Optional[str] = None, **kwargs):
        kwargs.setdefault('suggestions', [
            "Confirm the address points at a ControlByWeb module",
            "Check that the module firmware matches the selected device family",
        ])
        super().__init__(message, **kwargs)
        self.raw_text = raw_text
        if raw_text is not None:
            self.context['raw_text'] = raw_text


class UnsupportedMethodError(ControlByWebError):
    """The device family does not offer the requested operation."""
    DEFAULT_CODE = 3001
    CATEGORY = 'DEVICE'


class IllegalStateError(ControlByWebError):
    """An operation was attempted on a closed controller or in the wrong operating mode."""
    DEFAULT_CODE = 5001
    CATEGORY = 'STATE'


class InvalidArgumentError(ControlByWebError):
    """A caller passed an invalid argument (null node, empty command...)."""
    DEFAULT_CODE = 7001
    CATEGORY = 'VALIDATION'

    def __init__(self, message: str, argument: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if argument:
            self.context['argument'] = argument


class RangeError(InvalidArgumentError):
    """A numeric argument fell outside its permitted range."""
    DEFAULT_CODE = 7002

    def __init__(
        self,
        message: str,
        value: Any = None,
        minimum: Any = None,
        maximum: Any = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.value = value
        self.context['value'] = value
        if minimum is not None:
            self.context['minimum'] = minimum
        if maximum is not None:
            self.context['maximum'] = maximum


class PollError(ControlByWebError):
    """Unexpected failure inside the background poll loop."""
    DEFAULT_CODE = 9001
    CATEGORY = 'SYSTEM'


# Recoverable failures: the poll loop reports these and stops.
OPERATIONAL_ERRORS = (
    ConfigurationError,
    TransportError,
    UnauthorizedError,
    BadResponseError,
    IllegalStateError,
)

# Caller bugs: wrong arguments or unsupported operations.
USAGE_ERRORS = (
    InvalidArgumentError,
    UnsupportedMethodError,
)


def is_usage_error(error: BaseException) -> bool:
    """Return True when the error indicates a programming mistake by the caller."""
    return isinstance(error, USAGE_ERRORS)


class ErrorCodes:
    """Standard error codes for common error scenarios."""

    # Connection errors (1000-1999)
    TRANSPORT_FAILURE = 1001
    CONNECTION_FAILED = 1002
    STREAM_IO = 1003

    # Protocol errors (2000-2999)
    UNAUTHORIZED = 2001
    BAD_RESPONSE = 2002
    EMPTY_RESPONSE = 2003

    # Device errors (3000-3999)
    UNSUPPORTED_METHOD = 3001

    # State errors (5000-5999)
    DISPOSED = 5001

    # Configuration errors (6000-6999)
    CONFIG_INVALID = 6001
    CONFIG_NOT_FOUND = 6002
    MISSING_ADDRESS = 6003
    MISSING_CREDENTIAL = 6004

    # Validation errors (7000-7999)
    INVALID_ARGUMENT = 7001
    OUT_OF_RANGE = 7002

    # System errors (9000-9999)
    UNKNOWN_ERROR = 9000
    POLL_FAILURE = 9001


def wrap_external_error(e: Exception, message: str, error_class=PollError, **context) -> ControlByWebError:
    """
    Wrap an external exception in a ControlByWebError.

    Args:
        e: The original exception
        message: Context-specific error message
        error_class: The ControlByWebError subclass to use
        **context: Additional context information

    Returns:
        An error instance wrapping the original exception
    """
    return error_class(
        message=message,
        cause=e,
        context=context
    )
