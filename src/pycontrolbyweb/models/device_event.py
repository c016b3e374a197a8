"""
Scheduled events stored on the module (event0.xml .. event99.xml).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pycontrolbyweb.core.errors import RangeError

EVENT_MIN_ID = 0
EVENT_MAX_ID = 99
DESCRIPTION_MAX_LENGTH = 20


class PeriodUnits(Enum):
    """Units of an event's repeat period as they appear on the wire."""
    SECONDS = "s"
    MINUTES = "m"
    HOURS = "h"
    DAYS = "d"
    WEEKS = "w"
    DISABLED = "0"


class EventAction(Enum):
    TURN_ON = "turn relay(s) on"
    TURN_OFF = "turn relay(s) off"
    PULSE = "pulse relay(s)"
    TOGGLE = "toggle relay(s)"
    SET_EXT_VAR = "set extVar0"
    CLEAR_EXT_VAR = "clear extVar0"
    CHANGE_SCHEDULES = "change schedules"


def validate_event_id(event_id: int) -> int:
    if not isinstance(event_id, int) or not EVENT_MIN_ID <= event_id <= EVENT_MAX_ID:
        raise RangeError(
            f"Event id must be between {EVENT_MIN_ID} and {EVENT_MAX_ID}, got {event_id!r}",
            value=event_id,
            minimum=EVENT_MIN_ID,
            maximum=EVENT_MAX_ID,
        )
    return event_id


@dataclass(frozen=True)
class EventDescriptor:
    """
    One scheduled event.

    Attributes:
        event_id: Event slot (0-99)
        active: Whether the event is enabled
        current_time: Module clock when the event was read
        next_event: When the event fires next
        period: Repeat period, in period_units
        count: Remaining repetitions; 0 with active means repeat forever
        relay: Relay mask or number the action applies to
        action: Action text, see EventAction for known values
        pulse_duration: Pulse length in seconds for pulse actions
        description: Free text, at most 20 characters
    """

    event_id: int
    active: bool = False
    current_time: Optional[datetime] = None
    next_event: Optional[datetime] = None
    period: int = 0
    period_units: PeriodUnits = PeriodUnits.DISABLED
    count: int = 0
    relay: int = 0
    action: str = ""
    pulse_duration: float = 0.0
    description: str = ""

    def __post_init__(self):
        validate_event_id(self.event_id)
        if len(self.description) > DESCRIPTION_MAX_LENGTH:
            object.__setattr__(self, 'description', self.description[:DESCRIPTION_MAX_LENGTH])

    @property
    def always_on(self) -> bool:
        return self.active and self.count == 0

    @property
    def is_disabled(self) -> bool:
        return self.period_units == PeriodUnits.DISABLED

    @property
    def known_action(self) -> Optional[EventAction]:
        for action in EventAction:
            if action.value == self.action:
                return action
        return None
