"""
Tests for command construction.
"""

import unittest

from pycontrolbyweb.core.commands import CommandBuilder, basic_auth_token, format_value, validate_pulse_time
from pycontrolbyweb.core.errors import ConfigurationError, RangeError
from pycontrolbyweb.models.common import MAX_PULSE_DURATION, RelayState
from pycontrolbyweb.models.connection import Endpoint
from pycontrolbyweb.services.credential_store import StaticCredentialStore


class TestCommandBuilder(unittest.TestCase):
    """Test wire command formatting."""

    def setUp(self):
        self.builder = CommandBuilder(Endpoint("10.0.0.5"))
        self.auth_builder = CommandBuilder(
            Endpoint("10.0.0.5", auth_enabled=True, credential_ref="garage"),
            StaticCredentialStore({"garage": "secret"}),
        )

    def test_state_query(self):
        """Test the plain state request."""
        self.assertEqual(self.builder.state_query(), "GET /state.xml?noReply=0 HTTP/1.1\r\n\r\n")

    def test_auth_header_appended(self):
        """Test Basic auth of none:secret is appended verbatim."""
        command = self.auth_builder.state_query()

        self.assertEqual(
            command,
            "GET /state.xml?noReply=0 HTTP/1.1\r\n\r\n"
            "Authorization: Basic bm9uZTpzZWNyZXQ=\r\n\r\n"
        )

    def test_diagnostics_never_authenticated(self):
        """Test diagnostics requests omit the auth header."""
        self.assertNotIn("Authorization", self.auth_builder.diagnostics_query())
        self.assertNotIn("Authorization", self.auth_builder.clear_power_loss_counter())

    def test_event_query_is_authenticated_without_no_reply(self):
        """Test event requests carry auth and no noReply flag."""
        command = self.auth_builder.event_query(7)

        self.assertTrue(command.startswith("GET /event7.xml HTTP/1.1\r\n\r\n"))
        self.assertIn("Authorization: Basic", command)

    def test_missing_password_raises_configuration_error(self):
        """Test auth without a password fails before anything is sent."""
        builder = CommandBuilder(Endpoint("10.0.0.5", auth_enabled=True, credential_ref="unknown"))

        with self.assertRaises(ConfigurationError):
            builder.state_query()

    def test_non_ascii_password_raises_configuration_error(self):
        """Test a password outside ASCII is reported as a credential problem."""
        builder = CommandBuilder(
            Endpoint("10.0.0.5", auth_enabled=True, credential_ref="garage"),
            StaticCredentialStore({"garage": "pässwort"}),
        )

        with self.assertRaises(ConfigurationError) as ctx:
            builder.state_query()
        self.assertEqual(ctx.exception.context['setting'], "credential")
        with self.assertRaises(ConfigurationError):
            basic_auth_token("naïve")

    def test_relay_command_sets_no_reply(self):
        """Test relay commands request no reply."""
        command = self.builder.relay_command("relay2state", RelayState.ON)

        self.assertEqual(command, "GET /state.xml?relay2state=1&noReply=1 HTTP/1.1\r\n\r\n")

    def test_pulse_command_includes_pulse_time(self):
        """Test pulse commands append pulseTime."""
        command = self.builder.relay_command("relaystate", RelayState.PULSE, 1.5)

        self.assertEqual(command, "GET /state.xml?relaystate=2&pulseTime=1.5&noReply=1 HTTP/1.1\r\n\r\n")

    def test_pulse_time_ignored_for_non_pulse_states(self):
        """Test pulseTime only accompanies pulse transitions."""
        command = self.builder.relay_command("relay1state", RelayState.OFF, 3.0)

        self.assertNotIn("pulseTime", command)

    def test_clear_power_up_flags(self):
        """Test both flags are cleared with a correct noReply flag."""
        command = self.builder.clear_power_up_flags()

        self.assertEqual(
            command,
            "GET /diagnostics.xml?memoryPowerUpFlag=0&devicePowerUpFlag=0&noReply=1 HTTP/1.1\r\n\r\n"
        )

    def test_clear_device_power_up_flag_spelling(self):
        """Test the device flag clear uses noReply, not a misspelling."""
        self.assertIn("&noReply=1", self.builder.clear_device_power_up_flag())

    def test_format_value(self):
        """Test parameter rendering."""
        self.assertEqual(format_value(1.5), "1.5")
        self.assertEqual(format_value(2.0), "2")
        self.assertEqual(format_value(True), "1")
        self.assertEqual(format_value("C"), "C")


class TestPulseValidation(unittest.TestCase):
    """Test pulse duration rules."""

    def test_too_short_returns_none(self):
        """Test pulses below 0.1 s are dropped."""
        self.assertIsNone(validate_pulse_time(0.05))

    def test_too_long_raises(self):
        """Test pulses above the maximum raise RangeError."""
        with self.assertRaises(RangeError):
            validate_pulse_time(MAX_PULSE_DURATION + 1)

    def test_bounds_are_accepted(self):
        """Test 0.1 s and the maximum itself are valid."""
        self.assertEqual(validate_pulse_time(0.1), 0.1)
        self.assertEqual(validate_pulse_time(MAX_PULSE_DURATION), MAX_PULSE_DURATION)


if __name__ == '__main__':
    unittest.main()
