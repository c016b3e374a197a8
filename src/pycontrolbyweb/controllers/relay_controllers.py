"""
Controllers for the WebRelay and WebSwitch product lines.
"""

from typing import Iterator, List

from pycontrolbyweb.core.errors import RangeError
from pycontrolbyweb.models.common import RelayState
from pycontrolbyweb.models.states import (
    EXT_VAR_COUNT,
    WebRelay10PlusState,
    WebRelay10State,
    WebRelayQuadState,
    WebRelayState,
    WebSwitchPlusState,
)
from pycontrolbyweb.controllers.module_controller import ModuleController
from pycontrolbyweb.parsers.diagnostics import BasicDiagnosticsParser
from pycontrolbyweb.parsers.events import ScheduledEventParser
from pycontrolbyweb.parsers.relays import (
    WebRelay10PlusStateParser,
    WebRelay10StateParser,
    WebRelayQuadStateParser,
    WebRelayStateParser,
    WebSwitchPlusStateParser,
)


class WebRelayController(ModuleController):
    """
    Single-relay WebRelay with optional auto reboot.

    When auto reboot is enabled the module reports a pulsing relay as
    REBOOT; pass auto_reboot_enabled so states parse accordingly.
    """

    family = "webrelay"
    state_type = WebRelayState
    relay_count = 1

    def __init__(self, endpoint, credentials=None, auto_reboot_enabled: bool = False, **kwargs):
        self.auto_reboot_enabled = auto_reboot_enabled
        super().__init__(endpoint, credentials, **kwargs)

    def _create_state_parser(self):
        return WebRelayStateParser(self.auto_reboot_enabled)

    def relay_param(self, relay_id: int) -> str:
        return "relaystate"

    def _diff_commands(self, current: WebRelayState, desired: WebRelayState) -> Iterator[str]:
        yield from self._relay_diff(current, desired)
        if desired.total_reboots == 0 and current.total_reboots != 0:
            yield self.builder.state_update([("totalReboots", 0)])

    def clear_reboot_counter(self) -> str:
        return self._send_update(self.builder.state_update([("totalReboots", 0)]))

    def enable_auto_reboot(self) -> str:
        return self.set_relay(1, RelayState.ENABLE_AUTO_REBOOT)

    def disable_auto_reboot(self) -> str:
        return self.set_relay(1, RelayState.DISABLE_AUTO_REBOOT)


class ResetStateMixin:
    """Converge the module onto a default snapshot of its family."""

    def reset_state(self) -> List[str]:
        """
        Switch every relay off and return other settable fields to their
        defaults. Only the fields that differ are sent.
        """
        return self.set_state(self.state_type())


class WebRelayQuadController(ResetStateMixin, ModuleController):
    family = "webrelay-quad"
    state_type = WebRelayQuadState
    relay_count = 4

    def _create_state_parser(self):
        return WebRelayQuadStateParser()


class ExtVarMixin:
    """Extended variables extvar0..extvar4 stored on the module."""

    def set_ext_var(self, index: int, value: float) -> str:
        if not isinstance(index, int) or not 0 <= index < EXT_VAR_COUNT:
            raise RangeError(
                f"Extended variable index must be between 0 and {EXT_VAR_COUNT - 1}, got {index!r}",
                value=index,
                minimum=0,
                maximum=EXT_VAR_COUNT - 1,
            )
        return self._send_update(self.builder.state_update([(f"extvar{index}", value)]))

    def _ext_var_diff(self, current, desired) -> Iterator[str]:
        changed = [
            (f"extvar{index}", want)
            for index, (have, want) in enumerate(zip(current.ext_vars, desired.ext_vars))
            if have != want
        ]
        if changed:
            yield self.builder.state_update(changed)


class WebRelay10Controller(ExtVarMixin, ResetStateMixin, ModuleController):
    """WebRelay-10: ten relays, diagnostics and scheduled events."""

    family = "webrelay10"
    state_type = WebRelay10State
    relay_count = 10

    def _create_state_parser(self):
        return WebRelay10StateParser()

    def _create_diagnostics_parser(self):
        return BasicDiagnosticsParser()

    def _create_event_parser(self):
        return ScheduledEventParser()

    def _diff_commands(self, current: WebRelay10State, desired: WebRelay10State) -> Iterator[str]:
        yield from self._relay_diff(current, desired)
        yield from self._ext_var_diff(current, desired)


class WebRelay10PlusController(WebRelay10Controller):
    """WebRelay-10 Plus: same pages and commands, fractional input on-times."""

    family = "webrelay10-plus"
    state_type = WebRelay10PlusState

    def _create_state_parser(self):
        return WebRelay10PlusStateParser()


class WebSwitchPlusController(ResetStateMixin, ModuleController):
    """
    WebSwitch Plus: two switched outlets with per-outlet auto reboot.

    set_state() converges the outlets only; the reboot monitors, inputs and
    sensors are read-only.
    """

    family = "webswitch-plus"
    state_type = WebSwitchPlusState
    relay_count = 2

    def _create_state_parser(self):
        return WebSwitchPlusStateParser()

    def _create_diagnostics_parser(self):
        return BasicDiagnosticsParser()

    def _create_event_parser(self):
        return ScheduledEventParser()
