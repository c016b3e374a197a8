"""
Controller for the X-320M weather station.
"""

from pycontrolbyweb.controllers.module_controller import ModuleController
from pycontrolbyweb.models.states import X320MState
from pycontrolbyweb.parsers.diagnostics import WeatherDiagnosticsParser
from pycontrolbyweb.parsers.weather import X320MStateParser


class X320MController(ModuleController):
    """Weather readings are read-only; only the two relays can be set."""

    family = "x320m"
    state_type = X320MState
    relay_count = 2

    def _create_state_parser(self):
        return X320MStateParser()

    def _create_diagnostics_parser(self):
        return WeatherDiagnosticsParser()
