"""
XML response decoding.

Modules answer with a small XML document rooted at <datavalues> (or
<eventN> for event pages). Firmware omits fields depending on how the
module is configured, so lookups return None for absent children instead
of raising.
"""

import re
import xml.etree.ElementTree as ElementTree
from typing import Optional

from pycontrolbyweb.core.errors import BadResponseError, ErrorCodes

_EVENT_TAG = re.compile(r"^event(\d+)$")


def decode_document(text: str) -> ElementTree.Element:
    """
    Parse response text into its root element.

    Raises:
        BadResponseError: If the text is not well-formed XML; carries the raw text
    """
    try:
        return ElementTree.fromstring(text)
    except ElementTree.ParseError as e:
        raise BadResponseError(
            f"Response is not a valid XML document: {e}",
            raw_text=text,
            cause=e,
            error_code=ErrorCodes.BAD_RESPONSE,
        ) from e


def get_named_child(parent: Optional[ElementTree.Element], name: str) -> Optional[ElementTree.Element]:
    """Return the first direct child of parent named name, or None."""
    if parent is None or not name:
        return None
    for child in parent:
        if child.tag == name:
            return child
    return None


def get_child_text(parent: Optional[ElementTree.Element], name: str) -> Optional[str]:
    """Stripped text of a direct child, or None when the child is absent."""
    child = get_named_child(parent, name)
    if child is None:
        return None
    return (child.text or "").strip()


def event_id_from_tag(tag: str) -> Optional[int]:
    """Extract N from an "eventN" tag."""
    match = _EVENT_TAG.match(tag or "")
    return int(match.group(1)) if match else None


def find_event_node(root: Optional[ElementTree.Element], event_id: int) -> Optional[ElementTree.Element]:
    """
    Locate the <eventN> node in an event response.

    The event page is normally rooted at <eventN>; some firmware nests it
    inside <datavalues>.
    """
    if root is None:
        return None
    tag = f"event{event_id}"
    if root.tag == tag:
        return root
    return get_named_child(root, tag)
