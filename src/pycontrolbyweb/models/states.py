"""
Per-family device state snapshots.

A snapshot is built fresh from every successful state read and is never
mutated. To describe a desired state, derive a new snapshot with
with_relay() or dataclasses.replace() and hand it to set_state().
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from pycontrolbyweb.core.errors import RangeError
from pycontrolbyweb.models.common import (
    DEFAULT_PULSE_TIME,
    AlarmCondition,
    FanMode,
    HeatMode,
    InputState,
    PowerUpFlag,
    RebootState,
    RelayState,
    TemperatureUnits,
)
from pycontrolbyweb.models.io import AnalogInput, RebootStatus, Relay, SensorInput, StandardInput

EXT_VAR_COUNT = 5
ANALOG_MAX_RESOLUTION = 24.6
DEFAULT_FILTER_CHANGE_DAYS = 60
MIN_SET_TEMP = 0.0


def default_relays(count: int) -> Tuple[Relay, ...]:
    return tuple(Relay(relay_id=n) for n in range(1, count + 1))


def default_inputs(count: int) -> Tuple[StandardInput, ...]:
    return tuple(StandardInput(input_id=n) for n in range(1, count + 1))


def default_sensors(count: int) -> Tuple[SensorInput, ...]:
    return tuple(SensorInput(sensor_id=n) for n in range(1, count + 1))


class DeviceState:
    """Mixin for snapshots that carry a ``relays`` tuple."""

    relays: Tuple[Relay, ...] = ()

    def get_relay(self, relay_id: int) -> Relay:
        if not isinstance(relay_id, int) or not 1 <= relay_id <= len(self.relays):
            raise RangeError(
                f"Relay number must be between 1 and {len(self.relays)}, got {relay_id!r}",
                value=relay_id,
                minimum=1,
                maximum=len(self.relays),
            )
        return self.relays[relay_id - 1]

    def with_relay(self, relay_id: int, state: RelayState, pulse_time: Optional[float] = None):
        """Return a copy of this snapshot with one relay changed."""
        current = self.get_relay(relay_id)
        relays = list(self.relays)
        relays[relay_id - 1] = current.with_state(state, pulse_time)
        return replace(self, relays=tuple(relays))


@dataclass(frozen=True)
class WebRelayState(DeviceState):
    """
    Single-relay WebRelay.

    auto_reboot_enabled decides whether wire code 2 reads as PULSE or REBOOT.
    """

    relay_state: RelayState = RelayState.OFF
    input_state: InputState = InputState.OFF
    reboot_state: RebootState = RebootState.AUTO_REBOOT_OFF
    total_reboots: int = 0
    auto_reboot_enabled: bool = False
    pulse_time: float = DEFAULT_PULSE_TIME

    @property
    def relays(self) -> Tuple[Relay, ...]:
        return (Relay(relay_id=1, state=self.relay_state, pulse_time=self.pulse_time),)

    def with_relay(self, relay_id: int, state: RelayState, pulse_time: Optional[float] = None) -> "WebRelayState":
        relay = self.get_relay(relay_id).with_state(state, pulse_time)
        return replace(self, relay_state=relay.state, pulse_time=relay.pulse_time)


@dataclass(frozen=True)
class WebRelayQuadState(DeviceState):
    relays: Tuple[Relay, ...] = field(default_factory=lambda: default_relays(4))


@dataclass(frozen=True)
class WebRelay10State(DeviceState):
    relays: Tuple[Relay, ...] = field(default_factory=lambda: default_relays(10))
    inputs: Tuple[StandardInput, ...] = field(default_factory=lambda: default_inputs(2))
    sensors: Tuple[SensorInput, ...] = field(default_factory=lambda: default_sensors(3))
    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT
    ext_vars: Tuple[float, ...] = (0.0,) * EXT_VAR_COUNT
    serial_number: str = ""
    time: Optional[datetime] = None


@dataclass(frozen=True)
class WebRelay10PlusState(WebRelay10State):
    """WebRelay-10 Plus: the WebRelay-10 layout with fractional input on-times."""


@dataclass(frozen=True)
class WebSwitchPlusState(DeviceState):
    """
    WebSwitch Plus: two switched outlets, each with its own auto-reboot
    monitor, two inputs and three temperature sensors.
    """

    relays: Tuple[Relay, ...] = field(default_factory=lambda: default_relays(2))
    reboot_status: Tuple[RebootStatus, ...] = field(
        default_factory=lambda: tuple(RebootStatus(relay_id=n) for n in (1, 2))
    )
    inputs: Tuple[StandardInput, ...] = field(default_factory=lambda: default_inputs(2))
    sensors: Tuple[SensorInput, ...] = field(default_factory=lambda: default_sensors(3))
    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT
    ext_vars: Tuple[float, ...] = (0.0,) * EXT_VAR_COUNT
    serial_number: str = ""
    time: Optional[datetime] = None

    def get_reboot_status(self, relay_id: int) -> RebootStatus:
        self.get_relay(relay_id)
        return self.reboot_status[relay_id - 1]



@dataclass(frozen=True)
class X301State(DeviceState):
    relays: Tuple[Relay, ...] = field(default_factory=lambda: default_relays(2))
    inputs: Tuple[StandardInput, ...] = field(default_factory=lambda: default_inputs(2))
    ext_vars: Tuple[float, ...] = (0.0,) * EXT_VAR_COUNT
    serial_number: str = ""
    time: Optional[datetime] = None


@dataclass(frozen=True)
class TemperatureModuleState(DeviceState):
    sensors: Tuple[SensorInput, ...] = field(default_factory=lambda: default_sensors(4))
    relays: Tuple[Relay, ...] = field(default_factory=lambda: default_relays(2))
    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT


@dataclass(frozen=True)
class AnalogModuleState(DeviceState):
    """Eight analog inputs; resolution is the ADC step size in millivolts."""

    inputs: Tuple[AnalogInput, ...] = field(
        default_factory=lambda: tuple(AnalogInput(input_id=n) for n in range(1, 9))
    )
    power_up_flag: PowerUpFlag = PowerUpFlag.OFF
    resolution: float = 0.0

    @property
    def relays(self) -> Tuple[Relay, ...]:
        return ()


@dataclass(frozen=True)
class FiveInputModuleState(DeviceState):
    inputs: Tuple[StandardInput, ...] = field(default_factory=lambda: default_inputs(5))
    power_up_flag: PowerUpFlag = PowerUpFlag.OFF

    @property
    def relays(self) -> Tuple[Relay, ...]:
        return ()


@dataclass(frozen=True)
class X300ThermostatState(DeviceState):
    """
    X-300 in thermostat mode.

    heat, cool and fan are the relay outputs the thermostat drives; they
    are read-only. hold and reset_filter are requests: set_thermostat()
    sends them only when they are True, and a read never sets them.
    """

    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT
    indoor_temp: float = 0.0
    outdoor_temp: float = 0.0
    set_temp: float = 0.0
    heat: RelayState = RelayState.OFF
    cool: RelayState = RelayState.OFF
    fan: RelayState = RelayState.OFF
    min_temp_24h: float = 0.0
    max_temp_24h: float = 0.0
    min_temp_yesterday: float = 0.0
    max_temp_yesterday: float = 0.0
    heat_mode: HeatMode = HeatMode.OFF
    fan_mode: FanMode = FanMode.AUTO
    filter_change_days: int = DEFAULT_FILTER_CHANGE_DAYS
    min_set_temp: float = 0.0
    max_set_temp: float = 0.0
    serial_number: str = ""
    time: Optional[datetime] = None
    hold: bool = False
    reset_filter: bool = False

    @property
    def relays(self) -> Tuple[Relay, ...]:
        return ()

    def with_set_temp(self, temp: float) -> "X300ThermostatState":
        """
        Return a copy with a new setpoint.

        Raises:
            RangeError: If the module reported setpoint limits and temp is
                outside them, or temp is negative
        """
        limited = self.max_set_temp > self.min_set_temp
        if temp < MIN_SET_TEMP or (limited and not self.min_set_temp <= temp <= self.max_set_temp):
            low, high = (self.min_set_temp, self.max_set_temp) if limited else (MIN_SET_TEMP, None)
            raise RangeError(
                f"Set temperature {temp} is outside the module's limits",
                value=temp,
                minimum=low,
                maximum=high,
            )
        return replace(self, set_temp=temp)


@dataclass(frozen=True)
class X300TempMonitorState(DeviceState):
    """X-300 in temperature monitor mode: eight sensors and three relays."""

    units: TemperatureUnits = TemperatureUnits.FAHRENHEIT
    sensors: Tuple[SensorInput, ...] = field(default_factory=lambda: default_sensors(8))
    relays: Tuple[Relay, ...] = field(default_factory=lambda: default_relays(3))


class RainReading(Enum):
    LAST_HOUR = "rain1h"
    TODAY = "rainToday"
    LAST_SEVEN_DAYS = "rain7d"


class TemperatureReading(Enum):
    HIGH_TODAY = "tempH"
    HIGH_YESTERDAY = "tempHY"
    LOW_TODAY = "tempL"
    LOW_YESTERDAY = "tempLY"
    HEAT_INDEX = "heatIndex"
    WIND_CHILL = "windChill"
    DEW_POINT = "dewPoint"


class HumidityReading(Enum):
    HIGH_TODAY = "humidityH"
    HIGH_YESTERDAY = "humidityHY"
    LOW_TODAY = "humidityL"
    LOW_YESTERDAY = "humidityLY"


class BarometerReading(Enum):
    LAST_HOUR = "presN1"
    LAST_THREE_HOURS = "presN3"
    LAST_SIX_HOURS = "presN6"
    LAST_NINE_HOURS = "presN9"
    LAST_TWELVE_HOURS = "presN12"
    LAST_FIFTEEN_HOURS = "presN15"
    LAST_TWENTY_FOUR_HOURS = "presN24"


@dataclass(frozen=True)
class X320MState(DeviceState):
    """Weather station readings, history, alarms and its two relays."""

    wind_speed: float = 0.0
    wind_direction: float = 0.0
    rain_total: float = 0.0
    temperature: float = 0.0
    humidity: float = 0.0
    solar_radiation: float = 0.0
    barometric_pressure: float = 0.0
    aux1: float = 0.0
    aux2: float = 0.0
    rain_reset_time: Optional[datetime] = None
    wind_gust_speed: float = 0.0
    wind_gust_direction: float = 0.0
    rain_history: Mapping[RainReading, float] = field(default_factory=dict)
    temperature_history: Mapping[TemperatureReading, float] = field(default_factory=dict)
    humidity_history: Mapping[HumidityReading, float] = field(default_factory=dict)
    barometer_history: Mapping[BarometerReading, float] = field(default_factory=dict)
    rain_alarm: AlarmCondition = AlarmCondition.NORMAL
    temperature_alarm: AlarmCondition = AlarmCondition.NORMAL
    humidity_alarm: AlarmCondition = AlarmCondition.NORMAL
    barometer_alarm: AlarmCondition = AlarmCondition.NORMAL
    wind_gust_alarm: AlarmCondition = AlarmCondition.NORMAL
    power_up_time: Optional[datetime] = None
    relays: Tuple[Relay, ...] = field(default_factory=lambda: default_relays(2))
    serial_number: str = ""
    time: Optional[datetime] = None

    def __post_init__(self):
        # History groups are read-only views over private copies.
        for name in ("rain_history", "temperature_history", "humidity_history", "barometer_history"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
