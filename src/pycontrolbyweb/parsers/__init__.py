"""
Pluggable parsers that turn decoded XML into typed snapshots, one set
per module family.
"""

from pycontrolbyweb.parsers.base import DiagnosticsParser, EventParser, StateParser
from pycontrolbyweb.parsers.daq import (
    AnalogModuleStateParser,
    FiveInputModuleStateParser,
    TemperatureModuleStateParser,
    X300TempMonitorStateParser,
    X300ThermostatStateParser,
    X301StateParser,
)
from pycontrolbyweb.parsers.diagnostics import (
    BasicDiagnosticsParser,
    ExtendedDiagnosticsParser,
    WeatherDiagnosticsParser,
    serialize_diagnostics,
)
from pycontrolbyweb.parsers.events import ScheduledEventParser
from pycontrolbyweb.parsers.relays import (
    WebRelay10PlusStateParser,
    WebRelay10StateParser,
    WebRelayQuadStateParser,
    WebRelayStateParser,
    WebSwitchPlusStateParser,
)
from pycontrolbyweb.parsers.weather import X320MStateParser

__all__ = [
    "StateParser",
    "DiagnosticsParser",
    "EventParser",
    "WebRelayStateParser",
    "WebRelayQuadStateParser",
    "WebRelay10StateParser",
    "WebRelay10PlusStateParser",
    "WebSwitchPlusStateParser",
    "X301StateParser",
    "X300ThermostatStateParser",
    "X300TempMonitorStateParser",
    "TemperatureModuleStateParser",
    "AnalogModuleStateParser",
    "FiveInputModuleStateParser",
    "X320MStateParser",
    "BasicDiagnosticsParser",
    "ExtendedDiagnosticsParser",
    "WeatherDiagnosticsParser",
    "ScheduledEventParser",
    "serialize_diagnostics",
]
