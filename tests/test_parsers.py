"""
Tests for the state, diagnostics and event parsers.
"""

import unittest
from datetime import datetime, timezone

from pycontrolbyweb.core.errors import InvalidArgumentError
from pycontrolbyweb.core.xml_decoder import decode_document
from pycontrolbyweb.models.common import (
    AlarmCondition,
    FanMode,
    HeatMode,
    InputState,
    PowerUpFlag,
    RebootState,
    RelayState,
    TemperatureUnits,
)
from pycontrolbyweb.models.device_event import EventAction, PeriodUnits
from pycontrolbyweb.models.states import (
    HumidityReading,
    RainReading,
    TemperatureReading,
    WebRelay10PlusState,
    X320MState,
)
from pycontrolbyweb.parsers import (
    AnalogModuleStateParser,
    BasicDiagnosticsParser,
    ExtendedDiagnosticsParser,
    FiveInputModuleStateParser,
    ScheduledEventParser,
    TemperatureModuleStateParser,
    WeatherDiagnosticsParser,
    WebRelay10PlusStateParser,
    WebRelay10StateParser,
    WebRelayQuadStateParser,
    WebRelayStateParser,
    WebSwitchPlusStateParser,
    X300TempMonitorStateParser,
    X300ThermostatStateParser,
    X301StateParser,
    X320MStateParser,
    serialize_diagnostics,
)
from pycontrolbyweb.parsers.events import format_period, parse_period


def parse(parser, text):
    return parser.parse_state(decode_document(text))


class TestRelayParsers(unittest.TestCase):
    """Test the WebRelay family parsers."""

    def test_webrelay_fields(self):
        """Test all WebRelay fields are read."""
        state = parse(WebRelayStateParser(), (
            "<datavalues><relaystate>1</relaystate><inputstate>1</inputstate>"
            "<rebootstate>2</rebootstate><totalreboots>7</totalreboots></datavalues>"
        ))

        self.assertEqual(state.relay_state, RelayState.ON)
        self.assertEqual(state.input_state, InputState.ON)
        self.assertEqual(state.reboot_state, RebootState.WAITING_FOR_RESPONSE)
        self.assertEqual(state.total_reboots, 7)

    def test_webrelay_code_two_depends_on_auto_reboot(self):
        """Test code 2 reads as PULSE or REBOOT depending on configuration."""
        text = "<datavalues><relaystate>2</relaystate></datavalues>"

        self.assertEqual(parse(WebRelayStateParser(False), text).relay_state, RelayState.PULSE)
        self.assertEqual(parse(WebRelayStateParser(True), text).relay_state, RelayState.REBOOT)

    def test_missing_and_garbage_fields_default(self):
        """Test absent or unparseable fields fall back to defaults."""
        state = parse(WebRelayStateParser(), (
            "<datavalues><relaystate>banana</relaystate><rebootstate>9</rebootstate></datavalues>"
        ))

        self.assertEqual(state.relay_state, RelayState.OFF)
        self.assertEqual(state.input_state, InputState.OFF)
        self.assertEqual(state.reboot_state, RebootState.AUTO_REBOOT_OFF)
        self.assertEqual(state.total_reboots, 0)

    def test_quad_relays(self):
        """Test four relays are read in order."""
        state = parse(WebRelayQuadStateParser(), (
            "<datavalues><relay1state>1</relay1state><relay2state>0</relay2state>"
            "<relay3state>1</relay3state></datavalues>"
        ))

        self.assertEqual([relay.state for relay in state.relays],
                         [RelayState.ON, RelayState.OFF, RelayState.ON, RelayState.OFF])
        self.assertEqual(state.get_relay(3).relay_id, 3)

    def test_webrelay10_round_trip(self):
        """Test serialize then parse reproduces a WebRelay-10 snapshot."""
        parser = WebRelay10StateParser()
        original = parse(parser, (
            "<datavalues><relay1state>1</relay1state><relay10state>1</relay10state>"
            "<input2state>1</input2state><count2>12</count2><hightime2>30</hightime2>"
            "<sensor1temp>71.5</sensor1temp><units>C</units><extvar3>4.25</extvar3>"
            "<serialNumber>00:0C:C8:01:02:03</serialNumber><time>1700000000</time></datavalues>"
        ))

        again = parse(parser, parser.serialize_state(original))

        self.assertEqual(again, original)
        self.assertEqual(original.units, TemperatureUnits.CELSIUS)
        self.assertEqual(original.ext_vars[3], 4.25)
        self.assertEqual(original.inputs[1].count, 12)
        self.assertEqual(original.time, datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc))

    def test_webrelay10_plus_fractional_high_time(self):
        """Test the Plus variant keeps fractional input on-times."""
        text = "<datavalues><count1>2</count1><hightime1>12.75</hightime1></datavalues>"

        plus = parse(WebRelay10PlusStateParser(), text)
        plain = parse(WebRelay10StateParser(), text)

        self.assertIsInstance(plus, WebRelay10PlusState)
        self.assertEqual(plus.inputs[0].high_time, 12.75)
        self.assertEqual(plain.inputs[0].high_time, 0)

    def test_webswitch_plus_reboot_status(self):
        """Test each outlet reports its own auto-reboot monitor."""
        parser = WebSwitchPlusStateParser()
        original = parse(parser, (
            "<datavalues><relay1state>1</relay1state><relay2state>0</relay2state>"
            "<reboot1state>0</reboot1state><reboot2state>3</reboot2state>"
            "<failures2>4</failures2><rbtAttempts2>1</rbtAttempts2><totalreboots2>9</totalreboots2>"
            "<input1state>1</input1state><sensor2temp>68.0</sensor2temp><units>F</units>"
            "<serialNumber>00:0C:C8:04:05:06</serialNumber></datavalues>"
        ))

        status = original.get_reboot_status(2)
        self.assertEqual(original.get_relay(1).state, RelayState.ON)
        self.assertEqual(original.get_reboot_status(1).state, RebootState.AUTO_REBOOT_OFF)
        self.assertEqual(status.state, RebootState.REBOOTING)
        self.assertEqual((status.failures, status.attempts, status.total_reboots), (4, 1, 9))
        self.assertEqual(original.inputs[0].state, InputState.ON)
        self.assertEqual(original.inputs[0].count, 0)
        self.assertEqual(parse(parser, parser.serialize_state(original)), original)

    def test_none_node_raises(self):
        """Test parsers reject a None node."""
        for parser in (WebRelayStateParser(), WebRelayQuadStateParser(), WebRelay10StateParser()):
            with self.assertRaises(InvalidArgumentError):
                parser.parse_state(None)


class TestDaqParsers(unittest.TestCase):
    """Test the data-acquisition module parsers."""

    def test_x301_round_trip(self):
        """Test X-301 snapshots survive serialization."""
        parser = X301StateParser()
        original = parse(parser, (
            "<datavalues><relay2state>1</relay2state><input1state>1</input1state>"
            "<count1>3</count1><extvar0>1.5</extvar0></datavalues>"
        ))

        self.assertEqual(parse(parser, parser.serialize_state(original)), original)

    def test_temperature_module(self):
        """Test sensors, relays and units are read."""
        state = parse(TemperatureModuleStateParser(), (
            "<datavalues><sensor1temp>20.5</sensor1temp><sensor4temp>-3.0</sensor4temp>"
            "<relay1state>1</relay1state><units>C</units></datavalues>"
        ))

        self.assertEqual(state.sensors[0].value, 20.5)
        self.assertEqual(state.sensors[3].value, -3.0)
        self.assertEqual(state.get_relay(1).state, RelayState.ON)
        self.assertEqual(state.units, TemperatureUnits.CELSIUS)

    def test_unknown_units_default_to_fahrenheit(self):
        """Test unrecognised units fall back to Fahrenheit."""
        state = parse(TemperatureModuleStateParser(), "<datavalues><units>K</units></datavalues>")
        self.assertEqual(state.units, TemperatureUnits.FAHRENHEIT)

    def test_analog_merges_adc_state(self):
        """Test adcstate.xml modes and resolution merge into the state."""
        parser = AnalogModuleStateParser()
        state = parse(parser, (
            "<datavalues><input1state>1.25</input1state><input8state>5.5</input8state>"
            "<powerupflag>1</powerupflag></datavalues>"
        ))
        merged = parser.parse_adc_state(decode_document(
            "<datavalues><an1_mode>differential</an1_mode><an2_mode>single</an2_mode>"
            "<resolution>2.44</resolution></datavalues>"
        ), state)

        self.assertEqual(merged.inputs[0].value, 1.25)
        self.assertTrue(merged.inputs[0].differential)
        self.assertFalse(merged.inputs[1].differential)
        self.assertTrue(merged.inputs[7].out_of_range)
        self.assertEqual(merged.resolution, 2.44)
        self.assertEqual(merged.power_up_flag, PowerUpFlag.ON)
        self.assertEqual(merged.relays, ())

    def test_five_input_round_trip(self):
        """Test five-input snapshots survive serialization."""
        parser = FiveInputModuleStateParser()
        original = parse(parser, (
            "<datavalues><input5state>1</input5state><count5>44</count5>"
            "<hightime5>100</hightime5><powerupflag>1</powerupflag></datavalues>"
        ))

        self.assertEqual(parse(parser, parser.serialize_state(original)), original)
        self.assertEqual(original.inputs[4].count, 44)


    def test_x300_thermostat(self):
        """Test thermostat readings, modes and setpoint limits are read."""
        parser = X300ThermostatStateParser()
        original = parse(parser, (
            "<datavalues><units>F</units><indoorTemp>70.5</indoorTemp><outdoorTemp>41.0</outdoorTemp>"
            "<setTemp>72</setTemp><heat>1</heat><cool>0</cool><fan>1</fan>"
            "<minTemp>65.0</minTemp><maxTemp>73.5</maxTemp><heatMode>3</heatMode><fanMode>0</fanMode>"
            "<minSTemp>50</minSTemp><maxSTemp>90</maxSTemp></datavalues>"
        ))

        self.assertEqual(original.indoor_temp, 70.5)
        self.assertEqual(original.set_temp, 72.0)
        self.assertEqual(original.heat, RelayState.ON)
        self.assertEqual(original.fan, RelayState.ON)
        self.assertEqual(original.heat_mode, HeatMode.AUTO)
        self.assertEqual(original.fan_mode, FanMode.ON)
        self.assertEqual(original.filter_change_days, 60)
        self.assertEqual(original.relays, ())
        self.assertEqual(parse(parser, parser.serialize_state(original)), original)

    def test_x300_temp_monitor_unfitted_sensor(self):
        """Test an "x.x" reading marks the sensor as not fitted."""
        parser = X300TempMonitorStateParser()
        state = parse(parser, (
            "<datavalues><units>C</units><sensor1temp>19.5</sensor1temp><sensor2temp>x.x</sensor2temp>"
            "<relay3state>1</relay3state></datavalues>"
        ))

        self.assertTrue(state.sensors[0].fitted)
        self.assertFalse(state.sensors[1].fitted)
        self.assertEqual(state.sensors[1].value, 0.0)
        self.assertEqual(len(state.sensors), 8)
        self.assertEqual(state.get_relay(3).state, RelayState.ON)
        self.assertEqual(parse(parser, parser.serialize_state(state)), state)

class TestWeatherParser(unittest.TestCase):
    """Test the X-320M parser."""

    TEXT = (
        "<datavalues><windSpd>12.5</windSpd><windDir>270</windDir><temp>18.2</temp>"
        "<humidity>55</humidity><tempH>22.1</tempH><tempHY>21.0</tempHY><tempLY>4.5</tempLY>"
        "<humidityHY>80</humidityHY><tempAlarm>1</tempAlarm><presAlrm>2</presAlrm>"
        "<relay2state>1</relay2state><powerUp>1700000000</powerUp></datavalues>"
    )

    def test_readings_and_history(self):
        """Test current readings and history keys."""
        state = parse(X320MStateParser(), self.TEXT)

        self.assertEqual(state.wind_speed, 12.5)
        self.assertEqual(state.wind_direction, 270.0)
        self.assertEqual(state.temperature_history[TemperatureReading.HIGH_TODAY], 22.1)
        self.assertEqual(state.temperature_history[TemperatureReading.HIGH_YESTERDAY], 21.0)
        self.assertEqual(state.temperature_history[TemperatureReading.LOW_YESTERDAY], 4.5)
        self.assertNotIn(TemperatureReading.LOW_TODAY, state.temperature_history)
        self.assertEqual(state.humidity_history[HumidityReading.HIGH_YESTERDAY], 80.0)
        self.assertEqual(state.temperature_alarm, AlarmCondition.HIGH)
        self.assertEqual(state.barometer_alarm, AlarmCondition.LOW)
        self.assertEqual(state.get_relay(2).state, RelayState.ON)

    def test_history_is_read_only(self):
        """Test history groups cannot be changed through the snapshot."""
        state = parse(X320MStateParser(), self.TEXT)

        with self.assertRaises(TypeError):
            state.temperature_history[TemperatureReading.LOW_TODAY] = -3.0
        with self.assertRaises(TypeError):
            del state.humidity_history[HumidityReading.HIGH_YESTERDAY]

        source = {RainReading.TODAY: 1.2}
        built = X320MState(rain_history=source)
        source[RainReading.TODAY] = 9.9
        self.assertEqual(built.rain_history[RainReading.TODAY], 1.2)

    def test_round_trip(self):
        """Test X-320M snapshots survive serialization."""
        parser = X320MStateParser()
        original = parse(parser, self.TEXT)

        self.assertEqual(parse(parser, parser.serialize_state(original)), original)


class TestDiagnosticsParsers(unittest.TestCase):
    """Test diagnostics parsing."""

    def test_basic(self):
        """Test the shared counters."""
        diagnostics = BasicDiagnosticsParser().parse_diagnostics(decode_document(
            "<datavalues><memoryPowerUpFlag>1</memoryPowerUpFlag>"
            "<devicePowerUpFlag>0</devicePowerUpFlag><powerLossCounter>4</powerLossCounter></datavalues>"
        ))

        self.assertEqual(diagnostics.memory_power_up_flag, PowerUpFlag.ON)
        self.assertEqual(diagnostics.device_power_up_flag, PowerUpFlag.OFF)
        self.assertEqual(diagnostics.power_loss_counter, 4)

    def test_extended_negative_readings_clamped(self):
        """Test negative sensor readings become zero."""
        parser = ExtendedDiagnosticsParser()
        diagnostics = parser.parse_diagnostics(decode_document(
            "<datavalues><internalTemp>-40.0</internalTemp><vin>24.1</vin>"
            "<fiveVolt>5.02</fiveVolt></datavalues>"
        ))

        self.assertEqual(diagnostics.internal_temp, 0.0)
        self.assertEqual(diagnostics.voltage_in, 24.1)
        self.assertEqual(
            parser.parse_diagnostics(decode_document(serialize_diagnostics(diagnostics))),
            diagnostics
        )

    def test_weather(self):
        """Test the weather station's six-volt reading."""
        diagnostics = WeatherDiagnosticsParser().parse_diagnostics(decode_document(
            "<datavalues><internal6Volt>6.1</internal6Volt></datavalues>"
        ))
        self.assertEqual(diagnostics.internal_six_volt, 6.1)

    def test_none_node_raises(self):
        """Test diagnostics parsers reject a None node."""
        with self.assertRaises(InvalidArgumentError):
            BasicDiagnosticsParser().parse_diagnostics(None)


class TestEventParser(unittest.TestCase):
    """Test the scheduled event parser."""

    def test_parse_event(self):
        """Test all event fields and the id taken from the tag."""
        event = ScheduledEventParser().parse_event(decode_document(
            "<event12><active>yes</active><currentTime>1700000000</currentTime>"
            "<nextEvent>1700000900</nextEvent><period>15m</period><count>0</count>"
            "<relay>2</relay><action>pulse relay(s)</action><pulseDuration>1.5</pulseDuration>"
            "<description>Gate opener for the back yard</description></event12>"
        ))

        self.assertEqual(event.event_id, 12)
        self.assertTrue(event.active)
        self.assertTrue(event.always_on)
        self.assertEqual(event.period, 15)
        self.assertEqual(event.period_units, PeriodUnits.MINUTES)
        self.assertEqual(event.known_action, EventAction.PULSE)
        self.assertEqual(event.pulse_duration, 1.5)
        self.assertEqual(len(event.description), 20)
        self.assertEqual((event.next_event - event.current_time).total_seconds(), 900)

    def test_round_trip(self):
        """Test events survive serialization."""
        parser = ScheduledEventParser()
        original = parser.parse_event(decode_document(
            "<event3><active>no</active><currentTime>1700000000</currentTime>"
            "<period>2h</period><count>5</count><action>turn relay(s) on</action></event3>"
        ))

        self.assertEqual(parser.parse_event(decode_document(parser.serialize_event(original))), original)

    def test_event_without_id_raises(self):
        """Test a node whose tag carries no id needs an explicit one."""
        node = decode_document("<datavalues><active>yes</active></datavalues>")

        with self.assertRaises(InvalidArgumentError):
            ScheduledEventParser().parse_event(node)
        self.assertEqual(ScheduledEventParser().parse_event(node, event_id=5).event_id, 5)

    def test_period_parsing(self):
        """Test period strings."""
        self.assertEqual(parse_period("15m"), (15, PeriodUnits.MINUTES))
        self.assertEqual(parse_period("3D"), (3, PeriodUnits.DAYS))
        self.assertEqual(parse_period("0"), (0, PeriodUnits.DISABLED))
        self.assertEqual(parse_period("soon"), (0, PeriodUnits.DISABLED))
        self.assertEqual(format_period(15, PeriodUnits.MINUTES), "15m")
        self.assertEqual(format_period(0, PeriodUnits.HOURS), "0")


if __name__ == '__main__':
    unittest.main()
