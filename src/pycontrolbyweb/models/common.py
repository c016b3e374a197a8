"""
Protocol constants and enumerations shared by every module family.

The numeric values here are the codes the modules use on the wire.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Union

from pycontrolbyweb.core.errors import RangeError


DEFAULT_PORT = 80
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_RECEIVE_BUFFER_SIZE = 8192

MIN_PULSE_DURATION = 0.1
MAX_PULSE_DURATION = 86400
DEFAULT_PULSE_TIME = 1.5

UNAUTHORIZED_MARKER = "401 Authorization Required"
ROOT_TAG = "datavalues"


class RelayState(Enum):
    """
    Relay states.

    PULSE and REBOOT share wire code 2; which one applies depends on whether
    auto reboot is enabled on the module.
    """

    OFF = "off"
    ON = "on"
    PULSE = "pulse"
    REBOOT = "reboot"
    DISABLE_AUTO_REBOOT = "disable_auto_reboot"
    ENABLE_AUTO_REBOOT = "enable_auto_reboot"
    TOGGLE = "toggle"

    @property
    def code(self) -> int:
        """Wire code sent to the module for this state."""
        return _RELAY_CODES[self]


_RELAY_CODES = {
    RelayState.OFF: 0,
    RelayState.ON: 1,
    RelayState.PULSE: 2,
    RelayState.REBOOT: 2,
    RelayState.DISABLE_AUTO_REBOOT: 3,
    RelayState.ENABLE_AUTO_REBOOT: 4,
    RelayState.TOGGLE: 5,
}


class InputState(Enum):
    OFF = 0
    ON = 1


class RebootState(Enum):
    """Auto-reboot state machine reported by WebRelay modules."""
    AUTO_REBOOT_OFF = 0
    PINGING = 1
    WAITING_FOR_RESPONSE = 2
    REBOOTING = 3
    WAITING_FOR_BOOT = 4


class PowerUpFlag(Enum):
    OFF = 0
    ON = 1


class TemperatureUnits(Enum):
    FAHRENHEIT = "F"
    CELSIUS = "C"


class AlarmCondition(Enum):
    NORMAL = 0
    HIGH = 1
    LOW = 2


class X300OperationMode(Enum):
    """How an X-300 is configured; the mode decides the state.xml layout."""
    THERMOSTAT = "thermostat"
    TEMPERATURE_MONITOR = "monitor"


class HeatMode(Enum):
    OFF = 0
    HEAT_ONLY = 1
    COOL_ONLY = 2
    AUTO = 3


class FanMode(Enum):
    ON = 0
    AUTO = 1


def _code_in_range(code: int, low: int, high: int, what: str) -> int:
    try:
        value = int(code)
    except (TypeError, ValueError):
        raise RangeError(f"{what} code must be an integer, got {code!r}",
                         value=code, minimum=low, maximum=high)
    if not low <= value <= high:
        raise RangeError(f"{what} code {value} out of range ({low}-{high})",
                         value=value, minimum=low, maximum=high)
    return value


def get_relay_state(code: int, auto_reboot_enabled: bool = False) -> RelayState:
    """
    Convert a wire code into a RelayState.

    Raises:
        RangeError: If the code is outside 0-5
    """
    value = _code_in_range(code, 0, 5, "Relay state")
    if value == 2:
        return RelayState.REBOOT if auto_reboot_enabled else RelayState.PULSE
    for state, state_code in _RELAY_CODES.items():
        if state_code == value:
            return state
    raise RangeError(f"Unknown relay state code {value}", value=value)


def get_input_state(code: int) -> InputState:
    return InputState(_code_in_range(code, 0, 1, "Input state"))


def get_reboot_state(code: int) -> RebootState:
    return RebootState(_code_in_range(code, 0, 4, "Reboot state"))


def get_power_up_flag(code: int) -> PowerUpFlag:
    return PowerUpFlag(_code_in_range(code, 0, 1, "Power-up flag"))


def get_alarm_condition(code: int) -> AlarmCondition:
    return AlarmCondition(_code_in_range(code, 0, 2, "Alarm condition"))


def get_heat_mode(code: int) -> HeatMode:
    return HeatMode(_code_in_range(code, 0, 3, "Heat mode"))


def get_fan_mode(code: int) -> FanMode:
    return FanMode(_code_in_range(code, 0, 1, "Fan mode"))


def get_temperature_units(text: str) -> TemperatureUnits:
    """Units are reported as "C"; anything else starting with F is Fahrenheit."""
    normalized = (text or "").strip().upper()
    if normalized == "C":
        return TemperatureUnits.CELSIUS
    if normalized == "F":
        return TemperatureUnits.FAHRENHEIT
    raise RangeError(f"Unknown temperature units: {text!r}", value=text)


def from_epoch(seconds: Union[int, float]) -> datetime:
    """Convert module epoch seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(float(seconds), tz=timezone.utc)


def to_epoch(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())
