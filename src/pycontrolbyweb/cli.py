"""
Command-Line Interface

Reads and controls a module from the shell, either by naming a device
profile from the YAML configuration or by giving its address directly.

Usage:
    python -m pycontrolbyweb --device garage state
    python -m pycontrolbyweb --address 192.168.1.2 --family webrelay10 relay pulse 3 --seconds 2
    python -m pycontrolbyweb --device garage poll --count 10
"""

import argparse
import dataclasses
import logging
import os
import threading
from enum import Enum
from typing import Any, List, Optional

from pycontrolbyweb.core.error_formatting import ErrorFormatter, ErrorLogger
from pycontrolbyweb.core.errors import ConfigurationError, ControlByWebError
from pycontrolbyweb.models.common import DEFAULT_PULSE_TIME, X300OperationMode
from pycontrolbyweb.services.configuration_manager import (
    FAMILY_NAMES,
    X300_MODES,
    ConfigurationManager,
    DeviceConfig,
)
from pycontrolbyweb.services.controller_factory import create_controller
from pycontrolbyweb.services.credential_store import (
    CredentialProvider,
    EnvironmentCredentialStore,
    StaticCredentialStore,
)

logger = logging.getLogger(__name__)


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: List of arguments to parse. If None, uses sys.argv[1:]

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="pycontrolbyweb",
        description="ControlByWeb module client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --device garage state
  %(prog)s --address 192.168.1.2 --family webrelay relay on 1
  %(prog)s --device lab events
        """
    )

    parser.add_argument("--config", type=str, default=None,
                        help="YAML device configuration (default: ~/.pycontrolbyweb/devices.yaml)")
    parser.add_argument("--device", type=str, default=None,
                        help="Name of a configured device")
    parser.add_argument("--address", type=str, default=None, help="Module address")
    parser.add_argument("--port", type=int, default=80, help="Module port (default: 80)")
    parser.add_argument("--family", type=str, default="webrelay", choices=FAMILY_NAMES,
                        help="Module family when --address is used (default: webrelay)")
    parser.add_argument("--mode", type=str, default=X300OperationMode.TEMPERATURE_MONITOR.value, choices=X300_MODES,
                        help="X-300 operating mode when --address is used (default: monitor)")
    parser.add_argument("--password-env", type=str, default=None,
                        help="Environment variable holding the module password (enables auth)")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Set logging level (default: WARNING)")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("state", help="Print the module state")
    commands.add_parser("diagnostics", help="Print the diagnostics counters")

    event = commands.add_parser("event", help="Print one scheduled event")
    event.add_argument("event_id", type=int)

    commands.add_parser("events", help="Print all scheduled events")

    relay = commands.add_parser("relay", help="Switch a relay")
    relay.add_argument("action", choices=["on", "off", "toggle", "pulse"])
    relay.add_argument("relay_id", type=int)
    relay.add_argument("--seconds", type=float, default=DEFAULT_PULSE_TIME,
                       help=f"Pulse length (default: {DEFAULT_PULSE_TIME})")

    clear = commands.add_parser("clear", help="Clear diagnostics counters")
    clear.add_argument("what", choices=["power-loss", "power-up"])

    poll = commands.add_parser("poll", help="Poll the module and print each state")
    poll.add_argument("--count", type=int, default=0, help="Stop after N polls (default: run until interrupted)")
    poll.add_argument("--interval", type=float, default=None, help="Seconds between polls")

    return parser.parse_args(args)


def setup_logging(level: str):
    """Configure application logging."""
    numeric_level = getattr(logging, level.upper(), None)
    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def resolve_device(args: argparse.Namespace) -> DeviceConfig:
    """Build the device profile from --device or --address."""
    if args.device:
        return ConfigurationManager(args.config).load().get(args.device)
    if not args.address:
        raise ConfigurationError(
            "No module selected",
            setting_name="address",
            suggestions=["Pass --device NAME or --address ADDRESS"],
        )
    return DeviceConfig(
        name=args.address,
        family=args.family,
        address=args.address,
        port=args.port,
        mode=args.mode,
        auth_enabled=bool(args.password_env),
        credential="cli" if args.password_env else None,
    )


def resolve_credentials(args: argparse.Namespace) -> CredentialProvider:
    if args.password_env:
        password = os.environ.get(args.password_env)
        if password is None:
            raise ConfigurationError(
                f"Environment variable {args.password_env} is not set",
                setting_name="password-env",
            )
        return StaticCredentialStore({"cli": password})
    return EnvironmentCredentialStore()


def describe(value: Any, indent: int = 0) -> str:
    """Render a snapshot as indented text."""
    pad = "  " * indent
    if dataclasses.is_dataclass(value):
        lines = [f"{pad}{type(value).__name__}"]
        for field in dataclasses.fields(value):
            item = getattr(value, field.name)
            if dataclasses.is_dataclass(item) or isinstance(item, (tuple, dict)):
                lines.append(f"{pad}  {field.name}:")
                lines.append(describe(item, indent + 2))
            else:
                lines.append(f"{pad}  {field.name}: {describe(item)}")
        return "\n".join(lines)
    if isinstance(value, tuple):
        return "\n".join(describe(item, indent) for item in value)
    if isinstance(value, dict):
        return "\n".join(f"{pad}{describe(key)}: {describe(item)}" for key, item in value.items())
    if isinstance(value, Enum):
        return value.name
    return f"{pad}{value}" if indent else str(value)


def run_command(controller, args: argparse.Namespace) -> None:
    if args.command == "state":
        print(describe(controller.get_state()))
    elif args.command == "diagnostics":
        print(describe(controller.get_diagnostics()))
    elif args.command == "event":
        event = controller.get_event(args.event_id)
        print(describe(event) if event else f"Event {args.event_id} not found")
    elif args.command == "events":
        for event in controller.get_events():
            print(describe(event))
    elif args.command == "relay":
        if args.action == "on":
            controller.switch_relay_on(args.relay_id)
        elif args.action == "off":
            controller.switch_relay_off(args.relay_id)
        elif args.action == "toggle":
            controller.toggle_relay(args.relay_id)
        elif controller.pulse_relay(args.relay_id, args.seconds) is None:
            print(f"Pulse of {args.seconds}s is too short; nothing sent")
    elif args.command == "clear":
        if args.what == "power-loss":
            controller.clear_power_loss_counter()
        else:
            controller.clear_power_up_flags()
    elif args.command == "poll":
        run_poll(controller, args)


def run_poll(controller, args: argparse.Namespace) -> None:
    """Poll until --count states were printed, the cycle fails or Ctrl-C."""
    done = threading.Event()
    failure: List[ControlByWebError] = []
    seen = [0]

    def on_polled(state):
        seen[0] += 1
        print(describe(state), flush=True)
        if args.count and seen[0] >= args.count:
            done.set()

    def on_failed(error):
        failure.append(error)
        done.set()

    if args.interval is not None:
        controller.poll_interval = args.interval
    controller.add_polled_listener(on_polled)
    controller.add_poll_failed_listener(on_failed)
    controller.begin_poll_cycle()
    try:
        while not done.wait(0.5):
            pass
    except KeyboardInterrupt:
        logger.info("Polling interrupted")
    finally:
        controller.end_poll_cycle()
    if failure:
        raise failure[0]


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    parsed_args = parse_args(args)
    setup_logging(parsed_args.log_level)
    formatter = ErrorFormatter()
    error_logger = ErrorLogger(logger_name=__name__)

    try:
        config = resolve_device(parsed_args)
        with create_controller(config, resolve_credentials(parsed_args)) as controller:
            run_command(controller, parsed_args)
        return 0
    except ControlByWebError as e:
        error_logger.log_error(e, level=logging.DEBUG, extra_context={'command': parsed_args.command})
        print(f"Error: {formatter.format_for_user(e)}")
        return 1
