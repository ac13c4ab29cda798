"""
Turns decoded status names into bandwidth samples for known links.
"""

import logging
from typing import Optional

from .link_table import LinkTable
from .models import BandwidthSample, DecodedName

# Configure logging
logger = logging.getLogger(__name__)


def translate(decoded: DecodedName, table: LinkTable) -> Optional[BandwidthSample]:
    """
    Resolve the link of a decoded name.

    Args:
        decoded: Fields of a status interest
        table: Link table to resolve the gateway pair with

    Returns:
        The bandwidth sample, or None if the pair is not a known link
    """
    link_id = table.lookup(decoded.source_addr, decoded.dest_addr)
    if link_id is None:
        logger.debug(f"No link id for {decoded.source_addr} -> {decoded.dest_addr}, sample dropped")
        return None

    return BandwidthSample(
        link_id=link_id,
        timestamp=decoded.timestamp,
        tx_bits=decoded.tx_bits,
        rx_bits=decoded.rx_bits,
    )
