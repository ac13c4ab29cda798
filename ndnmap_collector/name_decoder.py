"""
Decoder for ndnmap status interest names.

Gateways report link counters entirely in the interest name:

    /ndn/wustl.edu/ndnstatus/<source addr>/<dest addr>/<timestamp>/<tx bytes>/<rx bytes>

The decoder reads the five trailing fields backward from the end of the
name. It is best-effort: a component that cannot be read leaves its field
empty and the remaining fields are still extracted.
"""

import logging
import re
from typing import Optional, Sequence

from .models import DecodedName

# Configure logging
logger = logging.getLogger(__name__)

MON_NAME_PREFIX = "/ndn/wustl.edu/ndnstatus"
MONITORING_TAG = "ndnstatus"

# Component that carries the monitoring tag
TAG_INDEX = 2

# Smallest value of ``count - 2`` a status name can have
MIN_END_COMPONENT = 7

# Components of this size or larger are not accepted as field values
FIELD_CAPACITY = 50

# Extraction order, from the last component backward
FIELD_ORDER = ("rx", "tx", "timestamp", "dest_addr", "source_addr")

_LEADING_INT = re.compile(r'[ \t\n\r\f\v]*\+?([0-9]+)')


class ComponentError(Exception):
    """A name component could not be read as a field value."""


def parse_byte_count(text: str) -> int:
    """
    Parse the leading decimal number of a counter field.

    Leading whitespace and a '+' sign are accepted and parsing stops at the
    first non-digit, so '125' and '125kB' both give 125. Anything without
    leading digits gives 0.
    """
    match = _LEADING_INT.match(text)
    if match is None:
        return 0
    return int(match.group(1))


def component_text(components: Sequence, index: int) -> str:
    """
    Fetch one component as text.

    Raises:
        ComponentError: If the component is missing, not bytes, not UTF-8,
            or at least FIELD_CAPACITY bytes long
    """
    if index < 0 or index >= len(components):
        raise ComponentError(f"no component {index} in a {len(components)}-component name")

    value = components[index]
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise ComponentError(f"component {index} is unreadable")

    value = bytes(value)
    if len(value) >= FIELD_CAPACITY:
        raise ComponentError(f"component {index} is {len(value)} bytes long")

    try:
        return value.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ComponentError(f"component {index} is not valid UTF-8: {e}") from e


def format_name(components: Sequence) -> str:
    """Render name components as a URI path for log messages."""
    parts = []
    for value in components:
        if isinstance(value, (bytes, bytearray, memoryview)):
            parts.append(bytes(value).decode('utf-8', errors='replace'))
        else:
            parts.append('?')
    return '/' + '/'.join(parts)


def decode(components: Sequence, count: Optional[int] = None,
           tag: str = MONITORING_TAG) -> Optional[DecodedName]:
    """
    Decode a status interest name.

    Args:
        components: Name component values, in order
        count: Number of component boundaries of the name, as reported by
            the transport. Defaults to ``len(components) + 1``.
        tag: Value expected in component 2

    Returns:
        The decoded fields, or None if the name is not a status name
    """
    if count is None:
        count = len(components) + 1

    endc = count - 2
    if endc < MIN_END_COMPONENT:
        logger.debug(f"Non monitoring interest received: {count} components")
        return None

    try:
        name_tag = component_text(components, TAG_INDEX)
    except ComponentError as e:
        logger.debug(f"Non monitoring interest received: {e}")
        return None
    if name_tag != tag:
        logger.debug(f"Non monitoring interest received: {name_tag}")
        return None

    fields = {}
    failed = []
    for field_name in FIELD_ORDER:
        try:
            fields[field_name] = component_text(components, endc)
            logger.debug(f" c{endc}:{fields[field_name]}")
        except ComponentError as e:
            failed.append(field_name)
            logger.debug(f"Error getting {field_name} component {endc} from name: {e}")
        endc -= 1

    tx_text = fields.get("tx", "")
    rx_text = fields.get("rx", "")
    return DecodedName(
        source_addr=fields.get("source_addr", ""),
        dest_addr=fields.get("dest_addr", ""),
        timestamp=fields.get("timestamp", ""),
        tx_text=tx_text,
        rx_text=rx_text,
        tx_bits=parse_byte_count(tx_text) * 8,
        rx_bits=parse_byte_count(rx_text) * 8,
        failed_fields=failed,
    )
