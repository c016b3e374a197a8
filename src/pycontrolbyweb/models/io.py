"""
Value objects for module inputs and outputs.
"""

from dataclasses import dataclass, replace
from typing import Optional

from pycontrolbyweb.core.errors import RangeError
from pycontrolbyweb.models.common import DEFAULT_PULSE_TIME, MAX_PULSE_DURATION, InputState, RebootState, RelayState

MAX_ANALOG_INPUT_VALUE = 5.0


@dataclass(frozen=True)
class Relay:
    """
    A relay output and its state.

    pulse_time is the duration, in seconds, sent when the desired state
    is PULSE or REBOOT. Modules do not report it, so read snapshots carry
    the default.
    """

    relay_id: int
    state: RelayState = RelayState.OFF
    name: str = ""
    pulse_time: float = DEFAULT_PULSE_TIME

    def __post_init__(self):
        if self.pulse_time > MAX_PULSE_DURATION:
            raise RangeError(
                f"Pulse time must not exceed {MAX_PULSE_DURATION} seconds, got {self.pulse_time}",
                value=self.pulse_time,
                maximum=MAX_PULSE_DURATION,
            )

    def with_state(self, state: RelayState, pulse_time: Optional[float] = None) -> "Relay":
        if pulse_time is None:
            return replace(self, state=state)
        return replace(self, state=state, pulse_time=pulse_time)


@dataclass(frozen=True)
class StandardInput:
    """
    A digital input.

    Attributes:
        count: Number of off-to-on transitions counted by the module
        high_time: Accumulated on-time in seconds (fractional on WebRelay-10 Plus)
    """

    input_id: int
    state: InputState = InputState.OFF
    count: int = 0
    high_time: float = 0


@dataclass(frozen=True)
class SensorInput:
    """A temperature (or similar) sensor reading; fitted is False for "x.x"."""

    sensor_id: int
    value: float = 0.0
    fitted: bool = True


@dataclass(frozen=True)
class RebootStatus:
    """
    Auto-reboot bookkeeping for one WebSwitch outlet.

    Attributes:
        failures: Consecutive failed pings
        attempts: Reboot attempts since the device last responded
        total_reboots: Reboots since the counter was last cleared
    """

    relay_id: int
    state: RebootState = RebootState.PINGING
    failures: int = 0
    attempts: int = 0
    total_reboots: int = 0


@dataclass(frozen=True)
class AnalogInput:
    """An analog input; readings above 5.0 volts are out of range."""

    input_id: int
    value: float = 0.0
    differential: bool = False

    @property
    def out_of_range(self) -> bool:
        return self.value > MAX_ANALOG_INPUT_VALUE
