"""
Diagnostics parsers.
"""

from pycontrolbyweb.models.common import PowerUpFlag, get_power_up_flag
from pycontrolbyweb.models.diagnostics import Diagnostics, ExtendedDiagnostics, WeatherDiagnostics
from pycontrolbyweb.parsers.base import (
    DiagnosticsParser,
    Node,
    check_root,
    document,
    read_enum,
    read_float,
    read_int,
    require_node,
)


def _base_fields(node: Node) -> dict:
    return {
        'memory_power_up_flag': read_enum(node, "memoryPowerUpFlag", get_power_up_flag, PowerUpFlag.OFF),
        'device_power_up_flag': read_enum(node, "devicePowerUpFlag", get_power_up_flag, PowerUpFlag.OFF),
        'power_loss_counter': read_int(node, "powerLossCounter"),
    }


def _non_negative(node: Node, name: str) -> float:
    # Modules report negative values when a sensor is not fitted.
    value = read_float(node, name)
    return value if value >= 0 else 0.0


class BasicDiagnosticsParser(DiagnosticsParser):

    def parse_diagnostics(self, node: Node) -> Diagnostics:
        node = require_node(node, "diagnostics")
        check_root(node)
        return Diagnostics(**_base_fields(node))


class ExtendedDiagnosticsParser(DiagnosticsParser):
    """X-300 series diagnostics with board temperature and supply voltages."""

    def parse_diagnostics(self, node: Node) -> ExtendedDiagnostics:
        node = require_node(node, "diagnostics")
        check_root(node)
        return ExtendedDiagnostics(
            internal_temp=_non_negative(node, "internalTemp"),
            voltage_in=_non_negative(node, "vin"),
            five_volt=_non_negative(node, "fiveVolt"),
            **_base_fields(node)
        )


class WeatherDiagnosticsParser(DiagnosticsParser):

    def parse_diagnostics(self, node: Node) -> WeatherDiagnostics:
        node = require_node(node, "diagnostics")
        check_root(node)
        return WeatherDiagnostics(
            internal_temp=_non_negative(node, "internalTemp"),
            voltage_in=_non_negative(node, "vin"),
            internal_six_volt=_non_negative(node, "internal6Volt"),
            **_base_fields(node)
        )


def serialize_diagnostics(diagnostics: Diagnostics) -> str:
    pairs = [
        ("memoryPowerUpFlag", diagnostics.memory_power_up_flag),
        ("devicePowerUpFlag", diagnostics.device_power_up_flag),
        ("powerLossCounter", diagnostics.power_loss_counter),
    ]
    if isinstance(diagnostics, ExtendedDiagnostics):
        pairs += [("internalTemp", diagnostics.internal_temp), ("vin", diagnostics.voltage_in),
                  ("fiveVolt", diagnostics.five_volt)]
    elif isinstance(diagnostics, WeatherDiagnostics):
        pairs += [("internalTemp", diagnostics.internal_temp), ("vin", diagnostics.voltage_in),
                  ("internal6Volt", diagnostics.internal_six_volt)]
    return document(pairs)
