"""
State parsers for the data-acquisition modules: X-301, temperature,
analog, five-input and the two X-300 layouts.
"""

from dataclasses import replace
from typing import Optional

from pycontrolbyweb.models.common import FanMode, HeatMode, PowerUpFlag, get_fan_mode, get_heat_mode, get_power_up_flag
from pycontrolbyweb.models.io import AnalogInput
from pycontrolbyweb.models.states import (
    DEFAULT_FILTER_CHANGE_DAYS,
    AnalogModuleState,
    FiveInputModuleState,
    TemperatureModuleState,
    X300TempMonitorState,
    X300ThermostatState,
    X301State,
)
from pycontrolbyweb.parsers.base import (
    Node,
    StateParser,
    check_root,
    document,
    read_enum,
    read_epoch,
    read_float,
    read_int,
    read_relay,
    read_text,
    require_node,
)
from pycontrolbyweb.parsers.common_fields import (
    ext_var_fields,
    input_fields,
    parse_ext_vars,
    parse_relays,
    parse_sensors,
    parse_standard_inputs,
    parse_units,
    relay_fields,
    sensor_fields,
)

DIFFERENTIAL_MODE = "differential"


class X301StateParser(StateParser):

    def parse_state(self, node: Node) -> X301State:
        node = require_node(node, "X-301 state")
        check_root(node)
        return X301State(
            relays=parse_relays(node, 2),
            inputs=parse_standard_inputs(node, 2),
            ext_vars=parse_ext_vars(node),
            serial_number=read_text(node, "serialNumber"),
            time=read_epoch(node, "time"),
        )

    def serialize_state(self, state: X301State) -> str:
        return document(
            relay_fields(state.relays)
            + input_fields(state.inputs)
            + ext_var_fields(state.ext_vars)
            + [("serialNumber", state.serial_number or None), ("time", state.time)]
        )


class TemperatureModuleStateParser(StateParser):

    def parse_state(self, node: Node) -> TemperatureModuleState:
        node = require_node(node, "temperature module state")
        check_root(node)
        return TemperatureModuleState(
            sensors=parse_sensors(node, 4),
            relays=parse_relays(node, 2),
            units=parse_units(node),
        )

    def serialize_state(self, state: TemperatureModuleState) -> str:
        return document(
            sensor_fields(state.sensors)
            + relay_fields(state.relays)
            + [("units", state.units)]
        )


class AnalogModuleStateParser(StateParser):
    """
    Analog module.

    Input values and the power-up flag come from state.xml; input modes and
    the ADC resolution come from a second page, adcstate.xml, merged in by
    parse_adc_state().
    """

    INPUT_COUNT = 8

    def parse_state(self, node: Node) -> AnalogModuleState:
        node = require_node(node, "analog module state")
        check_root(node)
        inputs = tuple(
            AnalogInput(input_id=n, value=read_float(node, f"input{n}state"))
            for n in range(1, self.INPUT_COUNT + 1)
        )
        return AnalogModuleState(
            inputs=inputs,
            power_up_flag=read_enum(node, "powerupflag", get_power_up_flag, PowerUpFlag.OFF),
        )

    def parse_adc_state(self, node: Node, state: Optional[AnalogModuleState] = None) -> AnalogModuleState:
        """Merge input modes and resolution from adcstate.xml into state."""
        node = require_node(node, "analog ADC state")
        state = state or AnalogModuleState()
        inputs = tuple(
            replace(item, differential=read_text(node, f"an{item.input_id}_mode") == DIFFERENTIAL_MODE)
            for item in state.inputs
        )
        return replace(
            state,
            inputs=inputs,
            resolution=read_float(node, "resolution", state.resolution),
        )

    def serialize_state(self, state: AnalogModuleState) -> str:
        return document(
            [(f"input{item.input_id}state", item.value) for item in state.inputs]
            + [("powerupflag", state.power_up_flag)]
        )

    def serialize_adc_state(self, state: AnalogModuleState) -> str:
        return document(
            [(f"an{item.input_id}_mode", DIFFERENTIAL_MODE if item.differential else "single")
             for item in state.inputs]
            + [("resolution", state.resolution)]
        )


class FiveInputModuleStateParser(StateParser):

    def parse_state(self, node: Node) -> FiveInputModuleState:
        node = require_node(node, "five-input module state")
        check_root(node)
        return FiveInputModuleState(
            inputs=parse_standard_inputs(node, 5),
            power_up_flag=read_enum(node, "powerupflag", get_power_up_flag, PowerUpFlag.OFF),
        )

    def serialize_state(self, state: FiveInputModuleState) -> str:
        return document(
            input_fields(state.inputs)
            + [("powerupflag", state.power_up_flag)]
        )


class X300ThermostatStateParser(StateParser):
    """X-300 state.xml in thermostat mode."""

    def parse_state(self, node: Node) -> X300ThermostatState:
        node = require_node(node, "X-300 thermostat state")
        check_root(node)
        return X300ThermostatState(
            units=parse_units(node),
            indoor_temp=read_float(node, "indoorTemp"),
            outdoor_temp=read_float(node, "outdoorTemp"),
            set_temp=read_float(node, "setTemp"),
            heat=read_relay(node, "heat"),
            cool=read_relay(node, "cool"),
            fan=read_relay(node, "fan"),
            min_temp_24h=read_float(node, "minTemp"),
            max_temp_24h=read_float(node, "maxTemp"),
            min_temp_yesterday=read_float(node, "minTempY"),
            max_temp_yesterday=read_float(node, "maxTempY"),
            heat_mode=read_enum(node, "heatMode", get_heat_mode, HeatMode.OFF),
            fan_mode=read_enum(node, "fanMode", get_fan_mode, FanMode.AUTO),
            filter_change_days=read_int(node, "filtChng", DEFAULT_FILTER_CHANGE_DAYS),
            min_set_temp=read_float(node, "minSTemp"),
            max_set_temp=read_float(node, "maxSTemp"),
            serial_number=read_text(node, "serialNumber"),
            time=read_epoch(node, "time"),
        )

    def serialize_state(self, state: X300ThermostatState) -> str:
        return document([
            ("units", state.units),
            ("indoorTemp", state.indoor_temp),
            ("outdoorTemp", state.outdoor_temp),
            ("setTemp", state.set_temp),
            ("heat", state.heat),
            ("cool", state.cool),
            ("fan", state.fan),
            ("minTemp", state.min_temp_24h),
            ("maxTemp", state.max_temp_24h),
            ("minTempY", state.min_temp_yesterday),
            ("maxTempY", state.max_temp_yesterday),
            ("heatMode", state.heat_mode),
            ("fanMode", state.fan_mode),
            ("filtChng", state.filter_change_days),
            ("minSTemp", state.min_set_temp),
            ("maxSTemp", state.max_set_temp),
            ("serialNumber", state.serial_number or None),
            ("time", state.time),
        ])


class X300TempMonitorStateParser(StateParser):
    """X-300 state.xml in temperature monitor mode; unfitted sensors read "x.x"."""

    def parse_state(self, node: Node) -> X300TempMonitorState:
        node = require_node(node, "X-300 temperature monitor state")
        check_root(node)
        return X300TempMonitorState(
            units=parse_units(node),
            sensors=parse_sensors(node, 8),
            relays=parse_relays(node, 3),
        )

    def serialize_state(self, state: X300TempMonitorState) -> str:
        return document(
            [("units", state.units)]
            + sensor_fields(state.sensors)
            + relay_fields(state.relays)
        )
