"""
Controllers for the data-acquisition modules.
"""

from typing import Iterator, List, Union

from pycontrolbyweb.core.commands import ADC_STATE_PAGE, STATE_PAGE, Param
from pycontrolbyweb.core.errors import IllegalStateError, InvalidArgumentError, RangeError
from pycontrolbyweb.models.common import FanMode, HeatMode, PowerUpFlag, X300OperationMode
from pycontrolbyweb.models.states import (
    ANALOG_MAX_RESOLUTION,
    MIN_SET_TEMP,
    AnalogModuleState,
    FiveInputModuleState,
    TemperatureModuleState,
    X300TempMonitorState,
    X300ThermostatState,
    X301State,
)
from pycontrolbyweb.controllers.module_controller import ModuleController
from pycontrolbyweb.controllers.relay_controllers import ExtVarMixin
from pycontrolbyweb.parsers.daq import (
    AnalogModuleStateParser,
    FiveInputModuleStateParser,
    TemperatureModuleStateParser,
    X300TempMonitorStateParser,
    X300ThermostatStateParser,
    X301StateParser,
)
from pycontrolbyweb.parsers.diagnostics import ExtendedDiagnosticsParser
from pycontrolbyweb.parsers.events import ScheduledEventParser


class X301Controller(ExtVarMixin, ModuleController):
    family = "x301"
    state_type = X301State
    relay_count = 2

    def _create_state_parser(self):
        return X301StateParser()

    def _create_diagnostics_parser(self):
        return ExtendedDiagnosticsParser()

    def _create_event_parser(self):
        return ScheduledEventParser()

    def _diff_commands(self, current: X301State, desired: X301State) -> Iterator[str]:
        yield from self._relay_diff(current, desired)
        yield from self._ext_var_diff(current, desired)


class TemperatureModuleController(ModuleController):
    """Four-sensor temperature module with two relays."""

    family = "temperature"
    state_type = TemperatureModuleState
    relay_count = 2

    def _create_state_parser(self):
        return TemperatureModuleStateParser()

    def _diff_commands(self, current: TemperatureModuleState, desired: TemperatureModuleState) -> Iterator[str]:
        if current.units != desired.units:
            yield self.builder.state_update([("units", desired.units.value)])
        yield from self._relay_diff(current, desired)


class AnalogModuleController(ModuleController):
    """
    Eight-input analog module.

    Its state spans two pages: input values come from state.xml and input
    modes from adcstate.xml.
    """

    family = "analog"
    state_type = AnalogModuleState

    def _create_state_parser(self):
        return AnalogModuleStateParser()

    def get_state(self) -> AnalogModuleState:
        state = super().get_state()
        root = self._query(self.builder.adc_state_query(), "ADC state")
        return self.state_parser.parse_adc_state(root, state)

    def _diff_commands(self, current: AnalogModuleState, desired: AnalogModuleState) -> Iterator[str]:
        if desired.resolution != current.resolution and desired.resolution > 0:
            yield self._resolution_command(desired.resolution)

    def _resolution_command(self, resolution: float) -> str:
        if not 0 < resolution <= ANALOG_MAX_RESOLUTION:
            raise RangeError(
                f"Resolution must be greater than 0 and at most {ANALOG_MAX_RESOLUTION}, got {resolution}",
                value=resolution,
                minimum=0,
                maximum=ANALOG_MAX_RESOLUTION,
            )
        return self.builder.build(ADC_STATE_PAGE, [("res", resolution)], no_reply=None)

    def set_resolution(self, resolution: float) -> str:
        return self._send_update(self._resolution_command(resolution))


class FiveInputModuleController(ModuleController):
    """Five counting inputs and a power-up flag."""

    family = "five-input"
    state_type = FiveInputModuleState
    input_count = 5

    def _create_state_parser(self):
        return FiveInputModuleStateParser()

    def _check_input(self, input_id: int) -> None:
        if not isinstance(input_id, int) or not 1 <= input_id <= self.input_count:
            raise RangeError(
                f"Input number must be between 1 and {self.input_count}, got {input_id!r}",
                value=input_id,
                minimum=1,
                maximum=self.input_count,
            )

    def _update_and_read(self, params) -> FiveInputModuleState:
        root = self._query(self.builder.build(STATE_PAGE, params, no_reply=False), "state")
        return self.state_parser.parse_state(root)

    def clear_counter(self, input_id: int) -> FiveInputModuleState:
        """Reset one input counter and return the resulting state."""
        self._check_input(input_id)
        return self._update_and_read([(f"count{input_id}", 0)])

    def clear_all_counters(self) -> FiveInputModuleState:
        return self._update_and_read([(f"count{n}", 0) for n in range(1, self.input_count + 1)])

    def clear_power_up_flag(self) -> FiveInputModuleState:
        return self._update_and_read([("powerUpFlag", 0)])

    def reset_all_states(self) -> FiveInputModuleState:
        self.clear_all_counters()
        return self.clear_power_up_flag()

    def _diff_commands(self, current: FiveInputModuleState, desired: FiveInputModuleState) -> Iterator[str]:
        params = [
            (f"count{want.input_id}", 0)
            for have, want in zip(current.inputs, desired.inputs)
            if want.count == 0 and have.count != 0
        ]
        if desired.power_up_flag == PowerUpFlag.OFF and current.power_up_flag == PowerUpFlag.ON:
            params.append(("powerUpFlag", 0))
        if params:
            yield self.builder.state_update(params)


class X300ModuleController(ModuleController):
    """
    X-300 thermostat / temperature monitor.

    The module is configured as one or the other and the mode decides the
    state.xml layout, so the controller must be told which it is talking
    to. In thermostat mode the heat, cool and fan relays belong to the
    thermostat and cannot be switched directly.
    """

    family = "x300"

    def __init__(
        self,
        endpoint,
        credentials=None,
        mode: Union[X300OperationMode, str] = X300OperationMode.TEMPERATURE_MONITOR,
        **kwargs,
    ):
        self._mode = X300OperationMode(mode)
        super().__init__(endpoint, credentials, **kwargs)

    @property
    def mode(self) -> X300OperationMode:
        return self._mode

    @property
    def state_type(self):
        if self._mode is X300OperationMode.THERMOSTAT:
            return X300ThermostatState
        return X300TempMonitorState

    @property
    def relay_count(self) -> int:
        return 0 if self._mode is X300OperationMode.THERMOSTAT else 3

    def _create_state_parser(self):
        if self._mode is X300OperationMode.THERMOSTAT:
            return X300ThermostatStateParser()
        return X300TempMonitorStateParser()

    def _create_diagnostics_parser(self):
        return ExtendedDiagnosticsParser()

    def change_mode(self, mode: Union[X300OperationMode, str]) -> None:
        """Switch the state layout after the module itself was reconfigured."""
        mode = X300OperationMode(mode)
        with self._lock:
            self._mode = mode
            self.state_parser = self._create_state_parser()
        self.logger.info(f"{self.family}: operating mode is now {mode.value}")

    def _require_mode(self, mode: X300OperationMode) -> None:
        if self._mode is not mode:
            raise IllegalStateError(
                f"Operation needs the X-300 in {mode.value} mode, controller is in {self._mode.value} mode"
            )

    def get_thermostat_state(self) -> X300ThermostatState:
        self._require_mode(X300OperationMode.THERMOSTAT)
        return self.get_state()

    def get_temp_monitor_state(self) -> X300TempMonitorState:
        self._require_mode(X300OperationMode.TEMPERATURE_MONITOR)
        return self.get_state()

    def _check_relay(self, relay_id: int) -> None:
        self._require_mode(X300OperationMode.TEMPERATURE_MONITOR)
        super()._check_relay(relay_id)

    # Thermostat -------------------------------------------------------------

    def _thermostat_update(self, params: List[Param]) -> str:
        self._require_mode(X300OperationMode.THERMOSTAT)
        return self._send_update(self.builder.state_update(params))

    def set_temperature(self, temp: float) -> str:
        if temp < MIN_SET_TEMP:
            raise RangeError(
                f"Set temperature must be at least {MIN_SET_TEMP}, got {temp}",
                value=temp,
                minimum=MIN_SET_TEMP,
            )
        return self._thermostat_update([("setTemp", temp)])

    def set_heat_mode(self, heat_mode: HeatMode) -> str:
        return self._thermostat_update([("heatMode", HeatMode(heat_mode).value)])

    def hold(self) -> str:
        """Hold the current setpoint against the module's schedule."""
        return self._thermostat_update([("hold", 1)])

    def change_fan_mode(self, fan_mode: FanMode) -> str:
        return self._thermostat_update([("fanMode", FanMode(fan_mode).value)])

    def reset_filter_counter(self) -> str:
        return self._thermostat_update([("rstFilt", 1)])

    def _thermostat_params(self, state: X300ThermostatState) -> List[Param]:
        if state.set_temp < MIN_SET_TEMP:
            raise RangeError(
                f"Set temperature must be at least {MIN_SET_TEMP}, got {state.set_temp}",
                value=state.set_temp,
                minimum=MIN_SET_TEMP,
            )
        params = [("setTemp", state.set_temp), ("heatMode", state.heat_mode.value)]
        if state.hold:
            params.append(("hold", 1))
        params.append(("fanMode", state.fan_mode.value))
        if state.reset_filter:
            params.append(("rstFilt", 1))
        return params

    def set_thermostat(self, state: X300ThermostatState) -> str:
        """Send every thermostat setting in one command, without reading first."""
        if not isinstance(state, X300ThermostatState):
            raise InvalidArgumentError(
                f"Expected X300ThermostatState, got {type(state).__name__}",
                argument="state",
            )
        return self._thermostat_update(self._thermostat_params(state))

    def _diff_commands(self, current, desired) -> Iterator[str]:
        if self._mode is X300OperationMode.TEMPERATURE_MONITOR:
            yield from self._relay_diff(current, desired)
            return
        changed = (
            current.set_temp != desired.set_temp
            or current.heat_mode != desired.heat_mode
            or current.fan_mode != desired.fan_mode
        )
        if changed or desired.hold or desired.reset_filter:
            yield self.builder.state_update(self._thermostat_params(desired))
