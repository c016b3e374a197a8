"""
Parser protocols and tolerant field readers.

Module firmware omits or garbles fields depending on configuration, so
every reader here falls back to a default instead of aborting the parse.
Only a missing root node is treated as an error.
"""

import logging
import xml.etree.ElementTree as ElementTree
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Tuple, TypeVar

from pycontrolbyweb.core.errors import ControlByWebError, InvalidArgumentError
from pycontrolbyweb.core.xml_decoder import get_child_text
from pycontrolbyweb.models.common import ROOT_TAG, RelayState, from_epoch, get_relay_state, to_epoch

logger = logging.getLogger(__name__)

T = TypeVar("T")
Node = Optional[ElementTree.Element]


def require_node(node: Node, what: str = "node") -> ElementTree.Element:
    """Raise InvalidArgumentError when node is None."""
    if node is None:
        raise InvalidArgumentError(f"Cannot parse {what}: node is None", argument="node")
    return node


def check_root(node: ElementTree.Element, expected: str = ROOT_TAG) -> None:
    if node.tag != expected:
        logger.warning(f"Unexpected root element <{node.tag}>, expected <{expected}>")


def read_converted(node: Node, name: str, convert: Callable[[str], T], default: T) -> T:
    """
    Read a child's text and convert it, falling back to default.

    A missing child, empty text or a failed conversion all yield default.
    """
    text = get_child_text(node, name)
    if not text:
        return default
    try:
        return convert(text)
    except (ValueError, TypeError, OverflowError, ControlByWebError) as e:
        logger.debug(f"Ignoring unparseable <{name}> value {text!r}: {e}")
        return default


def read_text(node: Node, name: str, default: str = "") -> str:
    text = get_child_text(node, name)
    return default if text is None else text


def read_int(node: Node, name: str, default: int = 0) -> int:
    return read_converted(node, name, int, default)


def read_float(node: Node, name: str, default: float = 0.0) -> float:
    return read_converted(node, name, float, default)


def read_enum(node: Node, name: str, convert: Callable[[int], T], default: T) -> T:
    """Read an integer code and map it through a converter such as get_input_state."""
    return read_converted(node, name, lambda text: convert(int(text)), default)


def read_epoch(node: Node, name: str, default: Optional[datetime] = None) -> Optional[datetime]:
    return read_converted(node, name, lambda text: from_epoch(int(float(text))), default)


def read_relay(node: Node, name: str, default: RelayState = RelayState.OFF,
               auto_reboot_enabled: bool = False) -> RelayState:
    return read_converted(node, name, lambda text: get_relay_state(int(text), auto_reboot_enabled), default)


def element(tag: str, value: Any) -> str:
    """Render one <tag>value</tag> pair for serializers."""
    if isinstance(value, Enum):
        value = value.code if isinstance(value, RelayState) else value.value
    elif isinstance(value, datetime):
        value = to_epoch(value)
    elif isinstance(value, bool):
        value = int(value)
    return f"<{tag}>{value}</{tag}>"


def document(pairs: Iterable[Tuple[str, Any]], root: str = ROOT_TAG) -> str:
    """Render a flat XML document from (tag, value) pairs, skipping None values."""
    body = "".join(element(tag, value) for tag, value in pairs if value is not None)
    return f"<{root}>{body}</{root}>"


class StateParser(ABC):
    """Converts a <datavalues> node into a family-specific state snapshot."""

    @abstractmethod
    def parse_state(self, node: Node) -> Any:
        """Raises InvalidArgumentError if node is None."""

    @abstractmethod
    def serialize_state(self, state: Any) -> str:
        """Render a state as the document parse_state accepts."""


class DiagnosticsParser(ABC):
    @abstractmethod
    def parse_diagnostics(self, node: Node) -> Any:
        """Raises InvalidArgumentError if node is None."""


class EventParser(ABC):
    @abstractmethod
    def parse_event(self, node: Node) -> Any:
        """Raises InvalidArgumentError if node is None."""
