"""
State parser for the X-320M weather station.
"""

from typing import Any, Dict, List, Tuple, Type

from pycontrolbyweb.models.common import AlarmCondition, get_alarm_condition
from pycontrolbyweb.models.states import (
    BarometerReading,
    HumidityReading,
    RainReading,
    TemperatureReading,
    X320MState,
)
from pycontrolbyweb.parsers.base import (
    Node,
    StateParser,
    check_root,
    document,
    read_enum,
    read_epoch,
    read_float,
    read_text,
    require_node,
)
from pycontrolbyweb.parsers.common_fields import parse_relays, relay_fields

# state attribute -> wire tag
READINGS = (
    ("wind_speed", "windSpd"),
    ("wind_direction", "windDir"),
    ("rain_total", "rainTot"),
    ("temperature", "temp"),
    ("humidity", "humidity"),
    ("solar_radiation", "solarRad"),
    ("barometric_pressure", "barPressure"),
    ("aux1", "aux1"),
    ("aux2", "aux2"),
    ("wind_gust_speed", "windGust"),
    ("wind_gust_direction", "windGustDir"),
)

ALARMS = (
    ("rain_alarm", "rainAlrm"),
    ("temperature_alarm", "tempAlarm"),
    ("humidity_alarm", "humidityAlrm"),
    ("barometer_alarm", "presAlrm"),
    ("wind_gust_alarm", "windAlrm"),
)

HISTORIES: Tuple[Tuple[str, Type], ...] = (
    ("rain_history", RainReading),
    ("temperature_history", TemperatureReading),
    ("humidity_history", HumidityReading),
    ("barometer_history", BarometerReading),
)


def _read_history(node: Node, readings: Type) -> Dict[Any, float]:
    history = {}
    for reading in readings:
        value = read_float(node, reading.value, None)
        if value is not None:
            history[reading] = value
    return history


class X320MStateParser(StateParser):
    """
    Weather station state.

    History groups only contain the readings the station reported.
    """

    def parse_state(self, node: Node) -> X320MState:
        node = require_node(node, "X-320M state")
        check_root(node)
        values: Dict[str, Any] = {}
        for attribute, tag in READINGS:
            values[attribute] = read_float(node, tag)
        for attribute, tag in ALARMS:
            values[attribute] = read_enum(node, tag, get_alarm_condition, AlarmCondition.NORMAL)
        for attribute, readings in HISTORIES:
            values[attribute] = _read_history(node, readings)
        return X320MState(
            rain_reset_time=read_epoch(node, "rainRst"),
            power_up_time=read_epoch(node, "powerUp"),
            relays=parse_relays(node, 2),
            serial_number=read_text(node, "serialNumber"),
            time=read_epoch(node, "time"),
            **values
        )

    def serialize_state(self, state: X320MState) -> str:
        pairs: List[Tuple[str, Any]] = []
        for attribute, tag in READINGS + ALARMS:
            pairs.append((tag, getattr(state, attribute)))
        for attribute, _ in HISTORIES:
            pairs.extend((reading.value, value) for reading, value in getattr(state, attribute).items())
        pairs.extend([
            ("rainRst", state.rain_reset_time),
            ("powerUp", state.power_up_time),
            ("serialNumber", state.serial_number or None),
            ("time", state.time),
        ])
        return document(pairs + relay_fields(state.relays))
