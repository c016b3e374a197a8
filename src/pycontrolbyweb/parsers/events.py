"""
Event page parser (event0.xml .. event99.xml).
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional, Tuple

from pycontrolbyweb.core.errors import InvalidArgumentError
from pycontrolbyweb.core.xml_decoder import event_id_from_tag
from pycontrolbyweb.models.common import from_epoch
from pycontrolbyweb.models.device_event import EventDescriptor, PeriodUnits
from pycontrolbyweb.parsers.base import (
    EventParser,
    Node,
    read_converted,
    read_float,
    read_int,
    read_text,
    require_node,
)

logger = logging.getLogger(__name__)

_PERIOD = re.compile(r"^\s*(\d+)\s*([smhdwSMHDW]?)\s*$")

_TIME_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
)


def parse_period(text: Optional[str]) -> Tuple[int, PeriodUnits]:
    """
    Split a period such as "15m" into (15, MINUTES).

    "0", an empty value and anything unrecognised mean the event does not repeat.
    """
    match = _PERIOD.match(text or "")
    if not match:
        return 0, PeriodUnits.DISABLED
    value, unit = int(match.group(1)), match.group(2).lower()
    if value == 0 or not unit:
        return 0, PeriodUnits.DISABLED
    return value, PeriodUnits(unit)


def format_period(period: int, units: PeriodUnits) -> str:
    if units == PeriodUnits.DISABLED or period <= 0:
        return PeriodUnits.DISABLED.value
    return f"{period}{units.value}"


def parse_event_time(text: str) -> datetime:
    """Parse an event timestamp given as epoch seconds or a date string."""
    text = text.strip()
    if re.fullmatch(r"\d+(\.\d+)?", text):
        return from_epoch(float(text))
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise ValueError(f"Unrecognised event time: {text!r}")


class ScheduledEventParser(EventParser):
    """
    Parses an <eventN> node.

    The event id is taken from the node's tag, so the parser must be handed
    the eventN element itself (see xml_decoder.find_event_node).
    """

    def parse_event(self, node: Node, event_id: Optional[int] = None) -> EventDescriptor:
        node = require_node(node, "event")
        tag_id = event_id_from_tag(node.tag)
        if tag_id is None:
            tag_id = event_id
        if tag_id is None:
            raise InvalidArgumentError(
                f"Cannot determine event id from element <{node.tag}>",
                argument="node",
            )

        period, units = parse_period(read_text(node, "period"))
        return EventDescriptor(
            event_id=tag_id,
            active=read_text(node, "active").lower() == "yes",
            current_time=read_converted(node, "currentTime", parse_event_time, None),
            next_event=read_converted(node, "nextEvent", parse_event_time, None),
            period=period,
            period_units=units,
            count=read_int(node, "count"),
            relay=read_int(node, "relay"),
            action=read_text(node, "action"),
            pulse_duration=read_float(node, "pulseDuration"),
            description=read_text(node, "description"),
        )

    def serialize_event(self, event: EventDescriptor) -> str:
        def stamp(moment: Optional[datetime]) -> Optional[str]:
            return None if moment is None else str(int(moment.timestamp()))

        parts = [
            ("active", "yes" if event.active else "no"),
            ("currentTime", stamp(event.current_time)),
            ("nextEvent", stamp(event.next_event)),
            ("period", format_period(event.period, event.period_units)),
            ("count", event.count),
            ("relay", event.relay),
            ("action", event.action),
            ("pulseDuration", event.pulse_duration),
            ("description", event.description or None),
        ]
        body = "".join(f"<{tag}>{value}</{tag}>" for tag, value in parts if value is not None)
        return f"<event{event.event_id}>{body}</event{event.event_id}>"
