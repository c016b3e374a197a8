"""
Tests for the command-line interface against the mock device server.
"""

import io
import unittest
from unittest.mock import patch

from pycontrolbyweb.cli import describe, main, parse_args, resolve_device
from pycontrolbyweb.models.common import RelayState
from pycontrolbyweb.models.io import Relay

from mock_device_server import MockDeviceServer

WEBRELAY_STATE = (
    "<datavalues><relaystate>1</relaystate><inputstate>0</inputstate>"
    "<rebootstate>0</rebootstate><totalreboots>2</totalreboots></datavalues>"
)


class TestParseArgs(unittest.TestCase):
    """Test argument parsing."""

    def test_relay_pulse_arguments(self):
        """Test pulse arguments and defaults."""
        args = parse_args(["--address", "10.0.0.5", "relay", "pulse", "3", "--seconds", "2"])

        self.assertEqual(args.command, "relay")
        self.assertEqual(args.action, "pulse")
        self.assertEqual(args.relay_id, 3)
        self.assertEqual(args.seconds, 2.0)
        self.assertEqual(args.port, 80)
        self.assertEqual(args.family, "webrelay")

    def test_x300_mode_reaches_profile(self):
        """Test --mode selects the X-300 operating mode for an address."""
        args = parse_args(["--address", "10.0.0.7", "--family", "x300", "--mode", "thermostat", "state"])

        config = resolve_device(args)

        self.assertEqual(config.family, "x300")
        self.assertEqual(config.mode, "thermostat")
        self.assertEqual(parse_args(["--address", "10.0.0.7", "state"]).mode, "monitor")

    def test_command_required(self):
        """Test a subcommand must be given."""
        with patch('sys.stderr', new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                parse_args(["--address", "10.0.0.5"])


class TestDescribe(unittest.TestCase):
    """Test the text renderer."""

    def test_describe_dataclass(self):
        """Test enums render by name."""
        text = describe(Relay(relay_id=2, state=RelayState.ON))

        self.assertIn("Relay", text)
        self.assertIn("relay_id: 2", text)
        self.assertIn("state: ON", text)


class TestMain(unittest.TestCase):
    """Test main() end to end."""

    def setUp(self):
        self.server = MockDeviceServer()
        self.server.set_page("state.xml", WEBRELAY_STATE)
        self.server.start()
        self.base = ["--address", "127.0.0.1", "--port", str(self.server.port), "--family", "webrelay"]

    def tearDown(self):
        self.server.stop()

    def test_state(self):
        """Test the state command prints the parsed snapshot."""
        with patch('sys.stdout', new_callable=io.StringIO) as out:
            code = main(self.base + ["state"])

        self.assertEqual(code, 0)
        self.assertIn("relay_state: ON", out.getvalue())
        self.assertIn("total_reboots: 2", out.getvalue())

    def test_relay_off(self):
        """Test relay commands reach the module."""
        with patch('sys.stdout', new_callable=io.StringIO):
            code = main(self.base + ["relay", "off", "1"])

        self.assertEqual(code, 0)
        self.assertTrue(self.server.received()[0].startswith("GET /state.xml?relaystate=0&noReply=1 HTTP/1.1"))

    def test_authenticated_request(self):
        """Test --password-env adds the Authorization header."""
        with patch.dict('os.environ', {"TEST_CBW_PASSWORD": "secret"}):
            with patch('sys.stdout', new_callable=io.StringIO):
                code = main(self.base + ["--password-env", "TEST_CBW_PASSWORD", "state"])

        self.assertEqual(code, 0)
        self.assertIn("Authorization: Basic bm9uZTpzZWNyZXQ=", self.server.received()[0])

    def test_unauthorized_reply_exits_with_error(self):
        """Test a 401 reply is reported and exits with 1."""
        self.server.force_response = b"HTTP/1.1 401 Authorization Required\r\n\r\n"

        with patch('sys.stdout', new_callable=io.StringIO) as out:
            code = main(self.base + ["state"])

        self.assertEqual(code, 1)
        self.assertIn("Error:", out.getvalue())

    def test_failure_details_are_logged(self):
        """Test the failing command and error code reach the debug log."""
        self.server.force_response = b"HTTP/1.1 401 Authorization Required\r\n\r\n"

        with self.assertLogs('pycontrolbyweb.cli', level='DEBUG') as captured:
            with patch('sys.stdout', new_callable=io.StringIO):
                code = main(self.base + ["state"])

        self.assertEqual(code, 1)
        self.assertTrue(any("[2001] UnauthorizedError" in line for line in captured.output))
        self.assertTrue(any('"command": "state"' in line for line in captured.output))

    def test_unsupported_command(self):
        """Test asking a WebRelay for diagnostics fails cleanly."""
        with patch('sys.stdout', new_callable=io.StringIO) as out:
            code = main(self.base + ["diagnostics"])

        self.assertEqual(code, 1)
        self.assertIn("no diagnostics", out.getvalue())

    def test_poll_count(self):
        """Test poll stops after the requested number of states."""
        with patch('sys.stdout', new_callable=io.StringIO) as out:
            code = main(self.base + ["poll", "--count", "2", "--interval", "0.01"])

        self.assertEqual(code, 0)
        self.assertGreaterEqual(out.getvalue().count("WebRelayState"), 2)

    def test_no_device_selected(self):
        """Test omitting both --device and --address is an error."""
        with patch('sys.stdout', new_callable=io.StringIO) as out:
            code = main(["state"])

        self.assertEqual(code, 1)
        self.assertIn("No module selected", out.getvalue())


if __name__ == '__main__':
    unittest.main()
