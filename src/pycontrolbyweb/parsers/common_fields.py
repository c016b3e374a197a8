"""
Field groups shared by several module families.
"""

from typing import Any, Iterable, List, Tuple

from pycontrolbyweb.models.common import (
    InputState,
    TemperatureUnits,
    get_input_state,
    get_temperature_units,
)
from pycontrolbyweb.models.io import Relay, SensorInput, StandardInput
from pycontrolbyweb.models.states import EXT_VAR_COUNT
from pycontrolbyweb.parsers.base import Node, read_converted, read_enum, read_float, read_int, read_relay, read_text

# Reported in place of a reading when no sensor is connected.
NO_SENSOR = "x.x"


def relay_tag(relay_id: int) -> str:
    return f"relay{relay_id}state"


def parse_relays(node: Node, count: int) -> Tuple[Relay, ...]:
    return tuple(
        Relay(relay_id=n, state=read_relay(node, relay_tag(n)))
        for n in range(1, count + 1)
    )


def parse_standard_inputs(node: Node, count: int, counters: bool = True,
                          fractional_high_time: bool = False) -> Tuple[StandardInput, ...]:
    read_high_time = read_float if fractional_high_time else read_int
    inputs = []
    for n in range(1, count + 1):
        inputs.append(StandardInput(
            input_id=n,
            state=read_enum(node, f"input{n}state", get_input_state, InputState.OFF),
            count=read_int(node, f"count{n}") if counters else 0,
            high_time=read_high_time(node, f"hightime{n}") if counters else 0,
        ))
    return tuple(inputs)


def parse_sensors(node: Node, count: int) -> Tuple[SensorInput, ...]:
    return tuple(
        SensorInput(
            sensor_id=n,
            value=read_float(node, f"sensor{n}temp"),
            fitted=read_text(node, f"sensor{n}temp") != NO_SENSOR,
        )
        for n in range(1, count + 1)
    )


def parse_units(node: Node) -> TemperatureUnits:
    return read_converted(node, "units", get_temperature_units, TemperatureUnits.FAHRENHEIT)


def parse_ext_vars(node: Node) -> Tuple[float, ...]:
    return tuple(read_float(node, f"extvar{n}") for n in range(EXT_VAR_COUNT))


def relay_fields(relays: Iterable[Relay]) -> List[Tuple[str, Any]]:
    return [(relay_tag(relay.relay_id), relay.state) for relay in relays]


def input_fields(inputs: Iterable[StandardInput], counters: bool = True) -> List[Tuple[str, Any]]:
    pairs = []
    for item in inputs:
        pairs.append((f"input{item.input_id}state", item.state))
        if counters:
            pairs.append((f"count{item.input_id}", item.count))
            pairs.append((f"hightime{item.input_id}", item.high_time))
    return pairs


def sensor_fields(sensors: Iterable[SensorInput]) -> List[Tuple[str, Any]]:
    return [(f"sensor{s.sensor_id}temp", s.value if s.fitted else NO_SENSOR) for s in sensors]


def ext_var_fields(ext_vars: Iterable[float]) -> List[Tuple[str, Any]]:
    return [(f"extvar{n}", value) for n, value in enumerate(ext_vars)]
