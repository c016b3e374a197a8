"""
Device configuration stored as YAML.

Each named device profile records the family, endpoint and polling
settings needed to build a controller. Passwords are not stored here;
profiles carry a credential reference resolved by a CredentialProvider.

Example file:

    devices:
      garage:
        family: webrelay
        address: 192.168.1.2
        auth_enabled: true
        credential: garage
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import yaml

from pycontrolbyweb.core.errors import ConfigurationError, ErrorCodes
from pycontrolbyweb.models.common import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PORT,
    DEFAULT_RECEIVE_BUFFER_SIZE,
    X300OperationMode,
)
from pycontrolbyweb.models.connection import Endpoint

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PYCONTROLBYWEB_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".pycontrolbyweb" / "devices.yaml"

FAMILY_NAMES = (
    "webrelay",
    "webrelay-quad",
    "webrelay10",
    "webrelay10-plus",
    "webswitch-plus",
    "x301",
    "x300",
    "temperature",
    "analog",
    "five-input",
    "x320m",
)

X300_MODES = tuple(mode.value for mode in X300OperationMode)


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH


@dataclass
class DeviceConfig:
    """One named device profile."""

    name: str
    family: str
    address: str
    port: int = DEFAULT_PORT
    auth_enabled: bool = False
    credential: Optional[str] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    receive_buffer_size: int = DEFAULT_RECEIVE_BUFFER_SIZE
    auto_reboot_enabled: bool = False
    mode: str = X300OperationMode.TEMPERATURE_MONITOR.value
    description: str = ""

    def __str__(self) -> str:
        return f"{self.name} ({self.family} at {self.address}:{self.port})"

    def to_dict(self) -> dict:
        """Convert to a dictionary for YAML serialization (name is the key)."""
        data = {
            'family': self.family,
            'address': self.address,
            'port': self.port,
            'auth_enabled': self.auth_enabled,
            'poll_interval': self.poll_interval,
            'receive_buffer_size': self.receive_buffer_size,
        }
        if self.credential:
            data['credential'] = self.credential
        if self.auto_reboot_enabled:
            data['auto_reboot_enabled'] = True
        if self.family == "x300":
            data['mode'] = self.mode
        if self.description:
            data['description'] = self.description
        return data

    @classmethod
    def from_dict(cls, name: str, data: dict) -> 'DeviceConfig':
        """Create from the mapping stored under a device name."""
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Device '{name}' must be a mapping, got {type(data).__name__}",
                setting_name=name,
                error_code=ErrorCodes.CONFIG_INVALID,
            )
        try:
            return cls(
                name=name,
                family=str(data['family']).lower(),
                address=data.get('address'),
                port=int(data.get('port', DEFAULT_PORT)),
                auth_enabled=bool(data.get('auth_enabled', False)),
                credential=data.get('credential'),
                poll_interval=float(data.get('poll_interval', DEFAULT_POLL_INTERVAL)),
                receive_buffer_size=int(data.get('receive_buffer_size', DEFAULT_RECEIVE_BUFFER_SIZE)),
                auto_reboot_enabled=bool(data.get('auto_reboot_enabled', False)),
                mode=str(data.get('mode', X300OperationMode.TEMPERATURE_MONITOR.value)).lower(),
                description=data.get('description', ''),
            )
        except KeyError as e:
            raise ConfigurationError(
                f"Device '{name}' is missing required setting {e}",
                setting_name=str(e).strip("'"),
                error_code=ErrorCodes.CONFIG_INVALID,
            ) from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Device '{name}' has an invalid setting: {e}",
                setting_name=name,
                cause=e,
                error_code=ErrorCodes.CONFIG_INVALID,
            ) from e

    def to_endpoint(self) -> Endpoint:
        return Endpoint(
            address=self.address,
            port=self.port,
            auth_enabled=self.auth_enabled,
            credential_ref=self.credential or self.name,
        )

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate the profile.

        Returns:
            Tuple of (is_valid, list_of_error_messages)
        """
        errors = []
        if self.family not in FAMILY_NAMES:
            errors.append(f"Unknown device family '{self.family}' (expected one of {', '.join(FAMILY_NAMES)})")
        if self.family == "x300" and self.mode not in X300_MODES:
            errors.append(f"Unknown X-300 mode '{self.mode}' (expected one of {', '.join(X300_MODES)})")
        valid, endpoint_errors = self.to_endpoint().validate()
        if not valid:
            errors.extend(endpoint_errors)
        if self.poll_interval < 0:
            errors.append(f"Poll interval must not be negative: {self.poll_interval}")
        if self.receive_buffer_size <= 0:
            errors.append(f"Receive buffer size must be positive: {self.receive_buffer_size}")
        return (len(errors) == 0, errors)


class ConfigurationManager:
    """Loads, edits and saves device profiles in a YAML file."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: YAML file path (default: $PYCONTROLBYWEB_CONFIG or
                ~/.pycontrolbyweb/devices.yaml)
        """
        self.config_file = Path(config_file) if config_file else default_config_path()
        self._devices: Dict[str, DeviceConfig] = {}

    def load(self) -> "ConfigurationManager":
        """
        Load profiles from the YAML file.

        A missing file yields an empty set of profiles.

        Raises:
            ConfigurationError: If the file cannot be read or parsed, or a
                profile is invalid
        """
        if not self.config_file.exists():
            logger.info(f"Configuration file not found: {self.config_file}. Starting with no devices.")
            self._devices = {}
            return self

        try:
            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Could not read configuration file {self.config_file}: {e}",
                setting_name="config_file",
                cause=e,
                error_code=ErrorCodes.CONFIG_NOT_FOUND,
            ) from e

        devices = data.get('devices') if isinstance(data, dict) else None
        if devices is None:
            devices = {}
        if not isinstance(devices, dict):
            raise ConfigurationError(
                f"'devices' in {self.config_file} must be a mapping",
                setting_name="devices",
                error_code=ErrorCodes.CONFIG_INVALID,
            )

        loaded = {}
        for name, entry in devices.items():
            config = DeviceConfig.from_dict(str(name), entry)
            self._check(config)
            loaded[config.name] = config
        self._devices = loaded
        logger.info(f"Loaded {len(self._devices)} device(s) from {self.config_file}")
        return self

    def save(self) -> None:
        """Write all profiles to the YAML file."""
        data = {'devices': {name: config.to_dict() for name, config in self._devices.items()}}
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, 'w') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True)
        logger.info(f"Saved {len(self._devices)} device(s) to {self.config_file}")

    def names(self) -> List[str]:
        return sorted(self._devices)

    def get(self, name: str) -> DeviceConfig:
        """
        Look up a profile by name.

        Raises:
            ConfigurationError: If no such device is configured
        """
        try:
            return self._devices[name]
        except KeyError:
            raise ConfigurationError(
                f"No device named '{name}' in {self.config_file}",
                setting_name=name,
                error_code=ErrorCodes.CONFIG_NOT_FOUND,
                suggestions=[f"Configured devices: {', '.join(self.names()) or 'none'}"],
            ) from None

    def add(self, config: DeviceConfig, overwrite: bool = False) -> None:
        self._check(config)
        if config.name in self._devices and not overwrite:
            raise ConfigurationError(
                f"Device '{config.name}' already exists",
                setting_name=config.name,
            )
        self._devices[config.name] = config

    def remove(self, name: str) -> bool:
        return self._devices.pop(name, None) is not None

    @staticmethod
    def _check(config: DeviceConfig) -> None:
        valid, errors = config.validate()
        if not valid:
            raise ConfigurationError(
                f"Invalid configuration for device '{config.name}': {'; '.join(errors)}",
                setting_name=config.name,
                error_code=ErrorCodes.CONFIG_INVALID,
            )
