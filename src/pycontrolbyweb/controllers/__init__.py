"""
Module controllers, one per device family.
"""

from pycontrolbyweb.controllers.daq_controllers import (
    AnalogModuleController,
    FiveInputModuleController,
    TemperatureModuleController,
    X300ModuleController,
    X301Controller,
)
from pycontrolbyweb.controllers.module_controller import ModuleController
from pycontrolbyweb.controllers.relay_controllers import (
    WebRelay10Controller,
    WebRelay10PlusController,
    WebRelayController,
    WebRelayQuadController,
    WebSwitchPlusController,
)
from pycontrolbyweb.controllers.weather_controller import X320MController

__all__ = [
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
