# pycontrolbyweb package
"""Client library for ControlByWeb networked I/O modules."""

__version__ = "0.1.0"

from pycontrolbyweb.core.errors import ControlByWebError
from pycontrolbyweb.models.common import FanMode, HeatMode, RelayState, X300OperationMode
from pycontrolbyweb.models.connection import Endpoint
from pycontrolbyweb.controllers import (
    AnalogModuleController,
    FiveInputModuleController,
    ModuleController,
    TemperatureModuleController,
    WebRelay10Controller,
    WebRelay10PlusController,
    WebRelayController,
    WebRelayQuadController,
    WebSwitchPlusController,
    X300ModuleController,
    X301Controller,
    X320MController,
)

__all__ = [
    "ControlByWebError",
    "RelayState",
    "HeatMode",
    "FanMode",
    "X300OperationMode",
    "Endpoint",
    "ModuleController",
    "WebRelayController",
    "WebRelayQuadController",
    "WebRelay10Controller",
    "WebRelay10PlusController",
    "WebSwitchPlusController",
    "X301Controller",
    "X300ModuleController",
    "TemperatureModuleController",
    "AnalogModuleController",
    "FiveInputModuleController",
    "X320MController",
]
