"""
Generic module controller.

A ModuleController ties together the command builder, the transport,
the family's parsers and a poll loop. Family controllers only declare
their parsers and relay layout and, where needed, extend the state
diff with family-specific commands.
"""

import logging
import threading
import xml.etree.ElementTree as ElementTree
from typing import Callable, Iterable, Iterator, List, Optional, Type

from pycontrolbyweb.core.commands import CommandBuilder, validate_pulse_time
from pycontrolbyweb.core.errors import (
    BadResponseError,
    ErrorCodes,
    IllegalStateError,
    InvalidArgumentError,
    RangeError,
    UnsupportedMethodError,
)
from pycontrolbyweb.core.poller import PollFailedListener, PolledListener, PollLoop
from pycontrolbyweb.core.transport import CommandTransport, mask_credentials
from pycontrolbyweb.core.xml_decoder import find_event_node
from pycontrolbyweb.models.common import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PULSE_TIME,
    DEFAULT_RECEIVE_BUFFER_SIZE,
    RelayState,
)
from pycontrolbyweb.models.connection import Endpoint
from pycontrolbyweb.models.device_event import EVENT_MAX_ID, EVENT_MIN_ID, EventDescriptor, validate_event_id
from pycontrolbyweb.models.states import DeviceState
from pycontrolbyweb.parsers.base import DiagnosticsParser, EventParser, StateParser
from pycontrolbyweb.services.credential_store import CredentialProvider


class ModuleController:
    """
    Controller for one networked module.

    Calls are synchronous and blocking. The controller is not designed for
    concurrent calls from several threads; keep one command in flight at a
    time. The poll loop runs on its own worker thread.

    Example:
        >>> with WebRelay10Controller(Endpoint("192.168.1.2")) as controller:
        ...     state = controller.get_state()
        ...     controller.set_state(state.with_relay(3, RelayState.ON))
    """

    family = "generic"
    state_type: Type = DeviceState
    relay_count = 0

    def __init__(
        self,
        endpoint: Endpoint,
        credentials: Optional[CredentialProvider] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        receive_buffer_size: int = DEFAULT_RECEIVE_BUFFER_SIZE,
        transport_factory: Callable[..., CommandTransport] = CommandTransport,
    ):
        """
        Initialize controller.

        Args:
            endpoint: Module address, port and auth settings
            credentials: Provider for the endpoint's password
            poll_interval: Seconds between polls in a poll cycle
            receive_buffer_size: Bytes read per response
            transport_factory: Builds the transport; replaced in tests
        """
        self.logger = logging.getLogger(__name__)
        self._credentials = credentials
        self._receive_buffer_size = receive_buffer_size
        self._transport_factory = transport_factory
        self._lock = threading.Lock()
        self._closed = False

        self.state_parser: StateParser = self._create_state_parser()
        self.diagnostics_parser: Optional[DiagnosticsParser] = self._create_diagnostics_parser()
        self.event_parser: Optional[EventParser] = self._create_event_parser()

        self._endpoint = endpoint
        self._transport = self._transport_factory(endpoint, receive_buffer_size)
        self._builder = CommandBuilder(endpoint, credentials)
        self._poller = PollLoop(self.get_state, interval=poll_interval, name=f"{self.family}-poll")

    # Parser hooks -----------------------------------------------------------

    def _create_state_parser(self) -> StateParser:
        raise NotImplementedError

    def _create_diagnostics_parser(self) -> Optional[DiagnosticsParser]:
        return None

    def _create_event_parser(self) -> Optional[EventParser]:
        return None

    def relay_param(self, relay_id: int) -> str:
        """Wire name of a relay's state parameter."""
        return f"relay{relay_id}state"

    # Endpoint ---------------------------------------------------------------

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @endpoint.setter
    def endpoint(self, endpoint: Endpoint) -> None:
        """Point the controller at another endpoint between requests."""
        with self._lock:
            self._ensure_open()
            self._endpoint = endpoint
            self._transport = self._transport_factory(endpoint, self._receive_buffer_size)
            self._builder = CommandBuilder(endpoint, self._credentials)
        self.logger.debug(f"{self.family} controller now targets {endpoint}")

    @property
    def builder(self) -> CommandBuilder:
        return self._builder

    @property
    def closed(self) -> bool:
        return self._closed

    # Transport helpers ------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise IllegalStateError(
                f"{self.family} controller has been closed",
                error_code=ErrorCodes.DISPOSED,
            )

    def send(self, command: str) -> Optional[ElementTree.Element]:
        """Send a raw command through the transport."""
        self._ensure_open()
        self.logger.debug(f"{self.family} -> {mask_credentials(command)!r}")
        return self._transport.send_command(command)

    def _query(self, command: str, what: str) -> ElementTree.Element:
        root = self.send(command)
        if root is None:
            raise BadResponseError(
                f"Module sent an empty reply to the {what} request",
                raw_text="",
                error_code=ErrorCodes.EMPTY_RESPONSE,
            )
        return root

    # State ------------------------------------------------------------------

    def get_state(self):
        """
        Read the module state.

        Raises:
            ConfigurationError, TransportError, UnauthorizedError,
            BadResponseError, IllegalStateError
        """
        root = self._query(self._builder.state_query(), "state")
        return self.state_parser.parse_state(root)

    def set_state(self, desired) -> List[str]:
        """
        Converge the module onto a desired state.

        Reads the current state and sends one command per entity that
        differs. Errors from reading the current state propagate.

        Returns:
            The commands that were sent (empty when nothing differed)
        """
        if not isinstance(desired, self.state_type):
            raise InvalidArgumentError(
                f"Expected {self.state_type.__name__}, got {type(desired).__name__}",
                argument="desired",
            )
        current = self.get_state()
        commands = list(self._diff_commands(current, desired))
        for command in commands:
            self.send(command)
        if commands:
            self.logger.info(f"{self.family}: sent {len(commands)} command(s) to converge state")
        else:
            self.logger.debug(f"{self.family}: state already matches, nothing sent")
        return commands

    def _diff_commands(self, current, desired) -> Iterator[str]:
        yield from self._relay_diff(current, desired)

    def _relay_diff(self, current, desired) -> Iterator[str]:
        pulsing = (RelayState.PULSE, RelayState.REBOOT)
        for have, want in zip(current.relays, desired.relays):
            if have.state == want.state and (want.state not in pulsing or have.pulse_time == want.pulse_time):
                continue
            pulse_time = None
            if want.state in pulsing:
                pulse_time = validate_pulse_time(want.pulse_time)
                if pulse_time is None:
                    continue
            yield self._builder.relay_command(self.relay_param(want.relay_id), want.state, pulse_time)

    # Diagnostics and events -------------------------------------------------

    def get_diagnostics(self):
        if self.diagnostics_parser is None:
            raise UnsupportedMethodError(f"{self.family} modules have no diagnostics page")
        root = self._query(self._builder.diagnostics_query(), "diagnostics")
        return self.diagnostics_parser.parse_diagnostics(root)

    def get_event(self, event_id: int) -> Optional[EventDescriptor]:
        """
        Read one scheduled event.

        Returns:
            The event, or None when the reply holds no <eventN> element

        Raises:
            RangeError: If event_id is outside 0-99
            UnsupportedMethodError: If the family has no events
        """
        validate_event_id(event_id)
        if self.event_parser is None:
            raise UnsupportedMethodError(f"{self.family} modules have no scheduled events")
        root = self._query(self._builder.event_query(event_id), f"event{event_id}")
        node = find_event_node(root, event_id)
        if node is None:
            self.logger.debug(f"{self.family}: no event{event_id} in reply")
            return None
        return self.event_parser.parse_event(node)

    def get_events(self, event_ids: Optional[Iterable[int]] = None) -> List[EventDescriptor]:
        """Read several events (all 100 slots by default)."""
        if event_ids is None:
            event_ids = range(EVENT_MIN_ID, EVENT_MAX_ID + 1)
        events = []
        for event_id in event_ids:
            event = self.get_event(event_id)
            if event is not None:
                events.append(event)
        return events

    def clear_power_loss_counter(self) -> str:
        self._require_diagnostics()
        return self._send_update(self._builder.clear_power_loss_counter())

    def clear_power_up_flags(self) -> str:
        self._require_diagnostics()
        return self._send_update(self._builder.clear_power_up_flags())

    def clear_memory_power_up_flag(self) -> str:
        self._require_diagnostics()
        return self._send_update(self._builder.clear_memory_power_up_flag())

    def clear_device_power_up_flag(self) -> str:
        self._require_diagnostics()
        return self._send_update(self._builder.clear_device_power_up_flag())

    def _require_diagnostics(self) -> None:
        if self.diagnostics_parser is None:
            raise UnsupportedMethodError(f"{self.family} modules have no diagnostics page")

    def _send_update(self, command: str) -> str:
        self.send(command)
        return command

    # Relays -----------------------------------------------------------------

    def _check_relay(self, relay_id: int) -> None:
        if self.relay_count == 0:
            raise UnsupportedMethodError(f"{self.family} modules have no relays")
        if not isinstance(relay_id, int) or not 1 <= relay_id <= self.relay_count:
            raise RangeError(
                f"Relay number must be between 1 and {self.relay_count}, got {relay_id!r}",
                value=relay_id,
                minimum=1,
                maximum=self.relay_count,
            )

    def set_relay(self, relay_id: int, state: RelayState, pulse_time: Optional[float] = None) -> str:
        self._check_relay(relay_id)
        return self._send_update(self._builder.relay_command(self.relay_param(relay_id), state, pulse_time))

    def switch_relay_on(self, relay_id: int) -> str:
        return self.set_relay(relay_id, RelayState.ON)

    def switch_relay_off(self, relay_id: int) -> str:
        return self.set_relay(relay_id, RelayState.OFF)

    def toggle_relay(self, relay_id: int) -> str:
        return self.set_relay(relay_id, RelayState.TOGGLE)

    def pulse_relay(self, relay_id: int, seconds: float = DEFAULT_PULSE_TIME) -> Optional[str]:
        """
        Pulse a relay.

        Returns:
            The command sent, or None when seconds is below the 0.1 s minimum

        Raises:
            RangeError: If the relay number is invalid or seconds exceeds
                MAX_PULSE_DURATION
        """
        self._check_relay(relay_id)
        pulse_time = validate_pulse_time(seconds)
        if pulse_time is None:
            self.logger.debug(f"{self.family}: pulse of {seconds}s on relay {relay_id} too short, skipped")
            return None
        return self.set_relay(relay_id, RelayState.PULSE, pulse_time)

    # Polling ----------------------------------------------------------------

    @property
    def is_polling(self) -> bool:
        return self._poller.is_polling

    @property
    def poll_interval(self) -> float:
        return self._poller.interval

    @poll_interval.setter
    def poll_interval(self, seconds: float) -> None:
        if seconds < 0:
            raise RangeError(f"Poll interval must not be negative, got {seconds}", value=seconds, minimum=0)
        self._poller.interval = seconds

    def add_polled_listener(self, listener: PolledListener) -> None:
        self._poller.add_polled_listener(listener)

    def remove_polled_listener(self, listener: PolledListener) -> None:
        self._poller.remove_polled_listener(listener)

    def add_poll_failed_listener(self, listener: PollFailedListener) -> None:
        self._poller.add_poll_failed_listener(listener)

    def remove_poll_failed_listener(self, listener: PollFailedListener) -> None:
        self._poller.remove_poll_failed_listener(listener)

    def begin_poll_cycle(self) -> None:
        """Start polling; a no-op while a poll cycle is already running."""
        self._ensure_open()
        self._poller.start()

    def end_poll_cycle(self) -> None:
        """Request the poll cycle to stop without waiting for it."""
        self._poller.stop()

    def wait_for_poll_exit(self, timeout: Optional[float] = None) -> bool:
        return self._poller.join(timeout)

    # Lifecycle --------------------------------------------------------------

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop polling, wait for the worker and dispose the transport."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._poller.close(timeout)
        self._transport.close()
        self.logger.debug(f"{self.family} controller closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
