"""
Builds controllers from device profiles.
"""

import logging
from typing import Dict, Optional, Type

from pycontrolbyweb.controllers import (
    AnalogModuleController,
    FiveInputModuleController,
    ModuleController,
    TemperatureModuleController,
    WebRelay10Controller,
    WebRelay10PlusController,
    WebRelayController,
    WebRelayQuadController,
    WebSwitchPlusController,
    X300ModuleController,
    X301Controller,
    X320MController,
)
from pycontrolbyweb.core.errors import ConfigurationError, ErrorCodes
from pycontrolbyweb.models.common import X300OperationMode
from pycontrolbyweb.services.configuration_manager import DeviceConfig
from pycontrolbyweb.services.credential_store import CredentialProvider

logger = logging.getLogger(__name__)

FAMILIES: Dict[str, Type[ModuleController]] = {
    controller.family: controller
    for controller in (
        WebRelayController,
        WebRelayQuadController,
        WebRelay10Controller,
        WebRelay10PlusController,
        WebSwitchPlusController,
        X301Controller,
        X300ModuleController,
        TemperatureModuleController,
        AnalogModuleController,
        FiveInputModuleController,
        X320MController,
    )
}


def controller_class(family: str) -> Type[ModuleController]:
    try:
        return FAMILIES[family.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown device family '{family}'",
            setting_name="family",
            error_code=ErrorCodes.CONFIG_INVALID,
            suggestions=[f"Use one of: {', '.join(sorted(FAMILIES))}"],
        ) from None


def create_controller(config: DeviceConfig, credentials: Optional[CredentialProvider] = None) -> ModuleController:
    """
    Build the controller matching a device profile.

    Raises:
        ConfigurationError: If the family is unknown or the profile is invalid
    """
    valid, errors = config.validate()
    if not valid:
        raise ConfigurationError(
            f"Invalid configuration for device '{config.name}': {'; '.join(errors)}",
            setting_name=config.name,
            error_code=ErrorCodes.CONFIG_INVALID,
        )

    cls = controller_class(config.family)
    kwargs = {
        'poll_interval': config.poll_interval,
        'receive_buffer_size': config.receive_buffer_size,
    }
    if cls is WebRelayController:
        kwargs['auto_reboot_enabled'] = config.auto_reboot_enabled
    elif cls is X300ModuleController:
        kwargs['mode'] = X300OperationMode(config.mode)

    logger.debug(f"Creating {cls.__name__} for {config}")
    return cls(config.to_endpoint(), credentials, **kwargs)
