"""
State parsers for the WebRelay and WebSwitch product lines.
"""

from pycontrolbyweb.models.common import (
    InputState,
    RebootState,
    RelayState,
    get_input_state,
    get_reboot_state,
)
from pycontrolbyweb.models.io import RebootStatus
from pycontrolbyweb.models.states import (
    WebRelay10PlusState,
    WebRelay10State,
    WebRelayQuadState,
    WebRelayState,
    WebSwitchPlusState,
)
from pycontrolbyweb.parsers.base import (
    Node,
    StateParser,
    check_root,
    document,
    read_enum,
    read_epoch,
    read_int,
    read_relay,
    read_text,
    require_node,
)
from pycontrolbyweb.parsers.common_fields import (
    ext_var_fields,
    input_fields,
    parse_ext_vars,
    parse_relays,
    parse_sensors,
    parse_standard_inputs,
    parse_units,
    relay_fields,
    sensor_fields,
)


class WebRelayStateParser(StateParser):
    """
    Single-relay WebRelay.

    The module reports the same code for pulse and reboot, so the parser
    needs to know whether auto reboot is configured.
    """

    def __init__(self, auto_reboot_enabled: bool = False):
        self.auto_reboot_enabled = auto_reboot_enabled

    def parse_state(self, node: Node) -> WebRelayState:
        node = require_node(node, "WebRelay state")
        check_root(node)
        return WebRelayState(
            relay_state=read_relay(node, "relaystate", RelayState.OFF, self.auto_reboot_enabled),
            input_state=read_enum(node, "inputstate", get_input_state, InputState.OFF),
            reboot_state=read_enum(node, "rebootstate", get_reboot_state, RebootState.AUTO_REBOOT_OFF),
            total_reboots=read_int(node, "totalreboots"),
            auto_reboot_enabled=self.auto_reboot_enabled,
        )

    def serialize_state(self, state: WebRelayState) -> str:
        return document([
            ("relaystate", state.relay_state),
            ("inputstate", state.input_state),
            ("rebootstate", state.reboot_state),
            ("totalreboots", state.total_reboots),
        ])


class WebRelayQuadStateParser(StateParser):

    def parse_state(self, node: Node) -> WebRelayQuadState:
        node = require_node(node, "WebRelay-Quad state")
        check_root(node)
        return WebRelayQuadState(relays=parse_relays(node, 4))

    def serialize_state(self, state: WebRelayQuadState) -> str:
        return document(relay_fields(state.relays))


class WebRelay10StateParser(StateParser):
    """WebRelay-10: ten relays, two counting inputs, three temperature sensors."""

    state_class = WebRelay10State
    fractional_high_time = False

    def parse_state(self, node: Node) -> WebRelay10State:
        node = require_node(node, "WebRelay-10 state")
        check_root(node)
        return self.state_class(
            relays=parse_relays(node, 10),
            inputs=parse_standard_inputs(node, 2, fractional_high_time=self.fractional_high_time),
            sensors=parse_sensors(node, 3),
            units=parse_units(node),
            ext_vars=parse_ext_vars(node),
            serial_number=read_text(node, "serialNumber"),
            time=read_epoch(node, "time"),
        )

    def serialize_state(self, state: WebRelay10State) -> str:
        return document(
            relay_fields(state.relays)
            + input_fields(state.inputs)
            + sensor_fields(state.sensors)
            + [("units", state.units)]
            + ext_var_fields(state.ext_vars)
            + [("serialNumber", state.serial_number or None), ("time", state.time)]
        )


class WebRelay10PlusStateParser(WebRelay10StateParser):
    state_class = WebRelay10PlusState
    fractional_high_time = True


class WebSwitchPlusStateParser(StateParser):
    """
    WebSwitch Plus.

    Each outlet reports its relay state and its auto-reboot monitor
    (rebootNstate, failuresN, rbtAttemptsN, totalrebootsN). Inputs carry
    no counters.
    """

    OUTLETS = 2

    def parse_state(self, node: Node) -> WebSwitchPlusState:
        node = require_node(node, "WebSwitch Plus state")
        check_root(node)
        reboot_status = tuple(
            RebootStatus(
                relay_id=n,
                state=read_enum(node, f"reboot{n}state", get_reboot_state, RebootState.PINGING),
                failures=read_int(node, f"failures{n}"),
                attempts=read_int(node, f"rbtAttempts{n}"),
                total_reboots=read_int(node, f"totalreboots{n}"),
            )
            for n in range(1, self.OUTLETS + 1)
        )
        return WebSwitchPlusState(
            relays=parse_relays(node, self.OUTLETS),
            reboot_status=reboot_status,
            inputs=parse_standard_inputs(node, 2, counters=False),
            sensors=parse_sensors(node, 3),
            units=parse_units(node),
            ext_vars=parse_ext_vars(node),
            serial_number=read_text(node, "serialNumber"),
            time=read_epoch(node, "time"),
        )

    def serialize_state(self, state: WebSwitchPlusState) -> str:
        pairs = relay_fields(state.relays)
        for status in state.reboot_status:
            n = status.relay_id
            pairs += [
                (f"reboot{n}state", status.state),
                (f"failures{n}", status.failures),
                (f"rbtAttempts{n}", status.attempts),
                (f"totalreboots{n}", status.total_reboots),
            ]
        return document(
            pairs
            + input_fields(state.inputs, counters=False)
            + sensor_fields(state.sensors)
            + [("units", state.units)]
            + ext_var_fields(state.ext_vars)
            + [("serialNumber", state.serial_number or None), ("time", state.time)]
        )
