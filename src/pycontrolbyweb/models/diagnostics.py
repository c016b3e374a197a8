"""
Diagnostics snapshots read from diagnostics.xml.
"""

from dataclasses import dataclass

from pycontrolbyweb.models.common import PowerUpFlag


@dataclass(frozen=True)
class Diagnostics:
    """
    Health counters common to every module with a diagnostics page.

    Attributes:
        memory_power_up_flag: Set when the module lost its memory on power-up
        device_power_up_flag: Set when the module powered up since last cleared
        power_loss_counter: Number of power losses since last cleared
    """

    memory_power_up_flag: PowerUpFlag = PowerUpFlag.OFF
    device_power_up_flag: PowerUpFlag = PowerUpFlag.OFF
    power_loss_counter: int = 0


@dataclass(frozen=True)
class ExtendedDiagnostics(Diagnostics):
    """Diagnostics of X-300 series modules, adding supply and board readings."""

    internal_temp: float = 0.0
    voltage_in: float = 0.0
    five_volt: float = 0.0


@dataclass(frozen=True)
class WeatherDiagnostics(Diagnostics):
    """Diagnostics of the X-320M weather station."""

    internal_temp: float = 0.0
    voltage_in: float = 0.0
    internal_six_volt: float = 0.0
