"""
Tests for device profiles, credential providers and the controller factory.
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml

from pycontrolbyweb.controllers import WebRelay10Controller, WebRelayController, X300ModuleController
from pycontrolbyweb.core.errors import ConfigurationError, ErrorCodes
from pycontrolbyweb.services.configuration_manager import (
    CONFIG_ENV_VAR,
    ConfigurationManager,
    DeviceConfig,
    default_config_path,
)
from pycontrolbyweb.services.controller_factory import FAMILIES, controller_class, create_controller
from pycontrolbyweb.services.credential_store import (
    EnvironmentCredentialStore,
    NullCredentialStore,
    StaticCredentialStore,
)


class TestDeviceConfig(unittest.TestCase):
    """Test DeviceConfig conversion and validation."""

    def test_from_dict_defaults(self):
        """Test optional settings take their defaults."""
        config = DeviceConfig.from_dict("garage", {'family': 'WebRelay', 'address': '192.168.1.2'})

        self.assertEqual(config.family, "webrelay")
        self.assertEqual(config.port, 80)
        self.assertEqual(config.poll_interval, 5.0)
        self.assertFalse(config.auth_enabled)

    def test_from_dict_missing_family(self):
        """Test a missing family raises ConfigurationError."""
        with self.assertRaises(ConfigurationError) as ctx:
            DeviceConfig.from_dict("garage", {'address': '192.168.1.2'})
        self.assertEqual(ctx.exception.error_code, ErrorCodes.CONFIG_INVALID)

    def test_from_dict_bad_port(self):
        """Test a non-numeric port raises ConfigurationError."""
        with self.assertRaises(ConfigurationError):
            DeviceConfig.from_dict("garage", {'family': 'webrelay', 'address': 'x', 'port': 'eighty'})

    def test_validate_reports_all_problems(self):
        """Test validation collects every error."""
        config = DeviceConfig(name="bad", family="toaster", address="", port=70000, poll_interval=-1)

        valid, errors = config.validate()

        self.assertFalse(valid)
        self.assertGreaterEqual(len(errors), 3)

    def test_x300_mode(self):
        """Test the X-300 mode is read, lowercased and validated."""
        config = DeviceConfig.from_dict("hall", {'family': 'x300', 'address': '10.0.0.7', 'mode': 'Thermostat'})

        self.assertEqual(config.mode, "thermostat")
        self.assertEqual(config.to_dict()['mode'], "thermostat")
        self.assertTrue(config.validate()[0])

        config.mode = "heater"
        valid, errors = config.validate()
        self.assertFalse(valid)
        self.assertIn("heater", errors[0])

    def test_mode_only_written_for_x300(self):
        """Test other families do not carry a mode setting."""
        self.assertNotIn('mode', DeviceConfig("garage", "webrelay", "10.0.0.5").to_dict())

    def test_endpoint_credential_reference(self):
        """Test the credential reference defaults to the device name."""
        self.assertEqual(DeviceConfig("garage", "webrelay", "10.0.0.5").to_endpoint().credential_ref, "garage")
        self.assertEqual(
            DeviceConfig("garage", "webrelay", "10.0.0.5", credential="shared").to_endpoint().credential_ref,
            "shared"
        )


class TestConfigurationManager(unittest.TestCase):
    """Test YAML persistence."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_file = Path(self.temp_dir.name) / "devices.yaml"

    def tearDown(self):
        self.temp_dir.cleanup()

    def _write(self, data):
        with open(self.config_file, 'w') as f:
            yaml.safe_dump(data, f)

    def test_missing_file_loads_empty(self):
        """Test a missing file yields no devices."""
        manager = ConfigurationManager(self.config_file).load()
        self.assertEqual(manager.names(), [])

    def test_load_devices(self):
        """Test profiles are loaded from YAML."""
        self._write({'devices': {
            'garage': {'family': 'webrelay', 'address': '192.168.1.2', 'auto_reboot_enabled': True},
            'barn': {'family': 'x301', 'address': '192.168.1.3', 'port': 8080},
        }})

        manager = ConfigurationManager(self.config_file).load()

        self.assertEqual(manager.names(), ['barn', 'garage'])
        self.assertTrue(manager.get('garage').auto_reboot_enabled)
        self.assertEqual(manager.get('barn').port, 8080)

    def test_invalid_yaml_raises(self):
        """Test unparseable YAML raises ConfigurationError."""
        self.config_file.write_text("devices: [unclosed")

        with self.assertRaises(ConfigurationError):
            ConfigurationManager(self.config_file).load()

    def test_invalid_profile_raises(self):
        """Test an unknown family aborts loading."""
        self._write({'devices': {'oven': {'family': 'toaster', 'address': '10.0.0.9'}}})

        with self.assertRaises(ConfigurationError):
            ConfigurationManager(self.config_file).load()

    def test_save_and_reload(self):
        """Test saved profiles load back unchanged."""
        manager = ConfigurationManager(self.config_file)
        config = DeviceConfig("pump", "webrelay10", "10.0.0.7", auth_enabled=True, credential="pump-house",
                              poll_interval=2.0, description="Well pump")
        manager.add(config)
        manager.save()

        reloaded = ConfigurationManager(self.config_file).load()

        self.assertEqual(reloaded.get("pump"), config)

    def test_add_duplicate_requires_overwrite(self):
        """Test adding an existing name needs overwrite=True."""
        manager = ConfigurationManager(self.config_file)
        manager.add(DeviceConfig("pump", "webrelay10", "10.0.0.7"))

        with self.assertRaises(ConfigurationError):
            manager.add(DeviceConfig("pump", "webrelay10", "10.0.0.8"))
        manager.add(DeviceConfig("pump", "webrelay10", "10.0.0.8"), overwrite=True)

        self.assertEqual(manager.get("pump").address, "10.0.0.8")
        self.assertTrue(manager.remove("pump"))
        self.assertFalse(manager.remove("pump"))

    def test_unknown_device_raises(self):
        """Test looking up an unknown name raises ConfigurationError."""
        with self.assertRaises(ConfigurationError) as ctx:
            ConfigurationManager(self.config_file).get("nowhere")
        self.assertEqual(ctx.exception.error_code, ErrorCodes.CONFIG_NOT_FOUND)

    def test_environment_override(self):
        """Test the config path can come from the environment."""
        with patch.dict(os.environ, {CONFIG_ENV_VAR: str(self.config_file)}):
            self.assertEqual(default_config_path(), self.config_file)


class TestCredentialStores(unittest.TestCase):
    """Test credential providers."""

    def test_null_store(self):
        """Test the null store never returns a password."""
        self.assertIsNone(NullCredentialStore().get_password("garage"))

    def test_static_store(self):
        """Test passwords can be registered and looked up."""
        store = StaticCredentialStore({"garage": "secret"})
        store.set_password("barn", "hay")

        self.assertEqual(store.get_password("garage"), "secret")
        self.assertEqual(store.get_password("barn"), "hay")
        self.assertIsNone(store.get_password(None))

    def test_environment_store(self):
        """Test references map to prefixed upper-case variables."""
        store = EnvironmentCredentialStore()

        self.assertEqual(store.variable_name("garage door"), "CBW_PASSWORD_GARAGE_DOOR")
        with patch.dict(os.environ, {"CBW_PASSWORD_GARAGE_DOOR": "opensesame"}):
            self.assertEqual(store.get_password("garage door"), "opensesame")
        self.assertIsNone(store.get_password(""))


class TestControllerFactory(unittest.TestCase):
    """Test building controllers from profiles."""

    def test_every_family_is_registered(self):
        """Test each configurable family maps to a controller."""
        self.assertEqual(len(FAMILIES), 11)
        self.assertIs(controller_class("WEBRELAY10"), WebRelay10Controller)
        self.assertIs(controller_class("x300"), X300ModuleController)

    def test_unknown_family(self):
        """Test unknown families raise ConfigurationError."""
        with self.assertRaises(ConfigurationError):
            controller_class("toaster")

    def test_create_controller(self):
        """Test the profile's settings reach the controller."""
        config = DeviceConfig("garage", "webrelay", "10.0.0.5", port=8080, poll_interval=1.5,
                              auto_reboot_enabled=True)

        controller = create_controller(config, StaticCredentialStore())
        try:
            self.assertIsInstance(controller, WebRelayController)
            self.assertTrue(controller.auto_reboot_enabled)
            self.assertEqual(controller.poll_interval, 1.5)
            self.assertEqual(controller.endpoint.port, 8080)
        finally:
            controller.close()

    def test_create_x300_controller_in_configured_mode(self):
        """Test the profile's X-300 mode reaches the controller."""
        controller = create_controller(DeviceConfig("hall", "x300", "10.0.0.7", mode="thermostat"))
        try:
            self.assertIsInstance(controller, X300ModuleController)
            self.assertEqual(controller.mode.value, "thermostat")
            self.assertEqual(controller.relay_count, 0)
        finally:
            controller.close()

    def test_create_controller_invalid_profile(self):
        """Test invalid profiles are rejected."""
        with self.assertRaises(ConfigurationError):
            create_controller(DeviceConfig("garage", "webrelay", ""))


if __name__ == '__main__':
    unittest.main()
