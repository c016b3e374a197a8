"""
Value objects: endpoints, protocol enums, I/O points and state snapshots.
"""

from pycontrolbyweb.models.common import (
    AlarmCondition,
    FanMode,
    HeatMode,
    InputState,
    PowerUpFlag,
    RebootState,
    RelayState,
    TemperatureUnits,
    X300OperationMode,
)
from pycontrolbyweb.models.connection import ConnectionState, ConnectionStatus, Endpoint
from pycontrolbyweb.models.device_event import EventDescriptor, PeriodUnits
from pycontrolbyweb.models.diagnostics import Diagnostics, ExtendedDiagnostics, WeatherDiagnostics
from pycontrolbyweb.models.io import AnalogInput, RebootStatus, Relay, SensorInput, StandardInput
from pycontrolbyweb.models.states import (
    AnalogModuleState,
    FiveInputModuleState,
    TemperatureModuleState,
    WebRelay10PlusState,
    WebRelay10State,
    WebRelayQuadState,
    WebRelayState,
    WebSwitchPlusState,
    X300TempMonitorState,
    X300ThermostatState,
    X301State,
    X320MState,
)

__all__ = [
    "AlarmCondition",
    "FanMode",
    "HeatMode",
    "InputState",
    "PowerUpFlag",
    "RebootState",
    "RelayState",
    "TemperatureUnits",
    "X300OperationMode",
    "ConnectionState",
    "ConnectionStatus",
    "Endpoint",
    "EventDescriptor",
    "PeriodUnits",
    "Diagnostics",
    "ExtendedDiagnostics",
    "WeatherDiagnostics",
    "AnalogInput",
    "RebootStatus",
    "Relay",
    "SensorInput",
    "StandardInput",
    "WebRelayState",
    "WebRelayQuadState",
    "WebRelay10State",
    "WebRelay10PlusState",
    "WebSwitchPlusState",
    "X301State",
    "X300ThermostatState",
    "X300TempMonitorState",
    "TemperatureModuleState",
    "AnalogModuleState",
    "FiveInputModuleState",
    "X320MState",
]
