"""
Command construction for the module line protocol.

Every request is a single HTTP/1.1 GET line terminated by a blank line:

    GET /state.xml?relay1state=1&noReply=1 HTTP/1.1\\r\\n\\r\\n

When authentication is enabled the Basic Authorization header is
appended verbatim after the request line, with the fixed user name
"none".
"""

import base64
from typing import Iterable, Optional, Sequence, Tuple

from pycontrolbyweb.core.errors import ConfigurationError, ErrorCodes, RangeError
from pycontrolbyweb.models.common import (
    MAX_PULSE_DURATION,
    MIN_PULSE_DURATION,
    RelayState,
)
from pycontrolbyweb.models.connection import Endpoint
from pycontrolbyweb.services.credential_store import CredentialProvider, NullCredentialStore

TERMINATOR = "\r\n\r\n"
AUTH_USER = "none"

STATE_PAGE = "state.xml"
DIAGNOSTICS_PAGE = "diagnostics.xml"
ADC_STATE_PAGE = "adcstate.xml"

Param = Tuple[str, object]


def format_value(value: object) -> str:
    """Render a parameter value the way the modules expect it."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def basic_auth_token(password: str) -> str:
    """Encode the Basic credential. Module passwords are limited to ASCII."""
    try:
        raw = f"{AUTH_USER}:{password}".encode("ascii")
    except UnicodeEncodeError:
        raise ConfigurationError(
            "Module passwords must contain ASCII characters only",
            setting_name="credential",
            error_code=ErrorCodes.CONFIG_INVALID,
        ) from None
    return base64.b64encode(raw).decode("ascii")


def validate_pulse_time(seconds: float) -> Optional[float]:
    """
    Apply the pulse duration rules.

    Returns:
        The pulse time to send, or None when it is too short to express
        (no command should be sent)

    Raises:
        RangeError: If the pulse time exceeds MAX_PULSE_DURATION
    """
    if seconds > MAX_PULSE_DURATION:
        raise RangeError(
            f"Pulse time {seconds} exceeds the maximum of {MAX_PULSE_DURATION} seconds",
            value=seconds,
            minimum=MIN_PULSE_DURATION,
            maximum=MAX_PULSE_DURATION,
            error_code=ErrorCodes.OUT_OF_RANGE,
        )
    if seconds < MIN_PULSE_DURATION:
        return None
    return seconds


class CommandBuilder:
    """
    Builds wire commands for one endpoint.

    Args:
        endpoint: Target module; its auth settings control the header
        credentials: Provider used to resolve endpoint.credential_ref
    """

    def __init__(self, endpoint: Endpoint, credentials: Optional[CredentialProvider] = None):
        self.endpoint = endpoint
        self.credentials = credentials or NullCredentialStore()

    def build(
        self,
        page: str,
        params: Sequence[Param] = (),
        no_reply: Optional[bool] = False,
        authenticate: bool = True,
    ) -> str:
        """
        Build a request line.

        Args:
            page: Page name, e.g. "state.xml"
            params: Ordered (name, value) pairs
            no_reply: True appends noReply=1, False appends noReply=0, None omits it
            authenticate: Whether the Authorization header may be added

        Raises:
            ConfigurationError: If auth is enabled but no password is available
        """
        pairs = [f"{name}={format_value(value)}" for name, value in params]
        if no_reply is not None:
            pairs.append(f"noReply={1 if no_reply else 0}")
        query = f"?{'&'.join(pairs)}" if pairs else ""
        command = f"GET /{page}{query} HTTP/1.1{TERMINATOR}"
        if authenticate and self.endpoint.auth_enabled:
            command += self._authorization_header()
        return command

    def _authorization_header(self) -> str:
        password = self.credentials.get_password(self.endpoint.credential_ref)
        if password is None:
            raise ConfigurationError(
                f"Authentication is enabled for {self.endpoint} but no password is available",
                setting_name="credential",
                error_code=ErrorCodes.MISSING_CREDENTIAL,
            )
        return f"Authorization: Basic {basic_auth_token(password)}{TERMINATOR}"

    def state_query(self) -> str:
        return self.build(STATE_PAGE, no_reply=False)

    def state_update(self, params: Iterable[Param]) -> str:
        return self.build(STATE_PAGE, list(params), no_reply=True)

    def diagnostics_query(self) -> str:
        # Diagnostics are never authenticated.
        return self.build(DIAGNOSTICS_PAGE, no_reply=False, authenticate=False)

    def event_query(self, event_id: int) -> str:
        return self.build(f"event{event_id}.xml", no_reply=None)

    def adc_state_query(self) -> str:
        return self.build(ADC_STATE_PAGE, no_reply=None)

    def relay_command(self, relay_param: str, state: RelayState, pulse_time: Optional[float] = None) -> str:
        """
        Build a relay transition command.

        Args:
            relay_param: Wire name of the relay, e.g. "relay1state"
            state: Target relay state
            pulse_time: Pulse length in seconds, sent only with PULSE/REBOOT
        """
        params = [(relay_param, state.code)]
        if pulse_time is not None and state in (RelayState.PULSE, RelayState.REBOOT):
            params.append(("pulseTime", pulse_time))
        return self.state_update(params)

    def clear_power_loss_counter(self) -> str:
        return self.build(DIAGNOSTICS_PAGE, [("powerLossCounter", 0)], no_reply=True, authenticate=False)

    def clear_memory_power_up_flag(self) -> str:
        return self.build(DIAGNOSTICS_PAGE, [("memoryPowerUpFlag", 0)], no_reply=True, authenticate=False)

    def clear_device_power_up_flag(self) -> str:
        return self.build(DIAGNOSTICS_PAGE, [("devicePowerUpFlag", 0)], no_reply=True, authenticate=False)

    def clear_power_up_flags(self) -> str:
        return self.build(
            DIAGNOSTICS_PAGE,
            [("memoryPowerUpFlag", 0), ("devicePowerUpFlag", 0)],
            no_reply=True,
            authenticate=False,
        )
