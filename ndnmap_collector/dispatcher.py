"""
Interest dispatcher for the ndnmap collector.

Registers one status prefix per known link with the transport and runs
every matching interest through decode, translate and forward.
"""

import enum
import logging
from typing import List, Optional, Sequence, Tuple

from . import name_decoder
from .exceptions import TransportError
from .forwarder import Forwarder
from .link_table import LinkTable
from .metrics import INTERESTS
from .models import BandwidthSample, DecodedName
from .translator import translate

# Configure logging
logger = logging.getLogger(__name__)


class UpcallKind(enum.Enum):
    """Kinds of events a transport hands to the dispatcher."""
    INTEREST = "interest"
    CONTENT = "content"
    INTEREST_TIMED_OUT = "interest_timed_out"
    FINAL = "final"


class UpcallResult(enum.Enum):
    """What the dispatcher did with an event."""
    OK = "ok"
    INTEREST_CONSUMED = "interest_consumed"


class InterestDispatcher:
    """Routes status interests from the transport to the forwarder."""

    def __init__(self, table: LinkTable, forwarder: Forwarder,
                 prefix: str = name_decoder.MON_NAME_PREFIX,
                 tag: str = name_decoder.MONITORING_TAG):
        """
        Initialize the dispatcher.

        Args:
            table: Link table resolving gateway pairs
            forwarder: Forwarder for resolved samples
            prefix: Monitoring name prefix
            tag: Monitoring tag expected in component 2 of status names
        """
        self.table = table
        self.forwarder = forwarder
        self.prefix = prefix.rstrip('/')
        self.tag = tag
        self.registered: List[str] = []

    def prefixes(self) -> List[str]:
        """Names to register, one per distinct link in table order."""
        names = []
        for entry in self.table:
            name = f"{self.prefix}/{entry.source_addr}/{entry.dest_addr}"
            if name not in names:
                names.append(name)
        return names

    def register(self, transport) -> List[str]:
        """
        Register the status prefix of every link with ``transport``.

        Raises:
            TransportError: If the transport refuses a prefix
        """
        for name in self.prefixes():
            try:
                transport.set_interest_filter(name, self.upcall)
            except ValueError as e:
                raise TransportError(f"Failed to register interest for name {name}: {e}") from e
            self.registered.append(name)
            logger.debug(f"Registered interest filter {name}")

        logger.info(f"Registered {len(self.registered)} status prefixes under {self.prefix}")
        return list(self.registered)

    def upcall(self, kind: UpcallKind, components: Sequence = (),
               count: Optional[int] = None) -> UpcallResult:
        """
        Handle one transport event.

        Only interests are processed. An interest whose name is a status
        name is consumed whether or not its link is known; no data is
        ever sent back.
        """
        if kind is not UpcallKind.INTEREST:
            INTERESTS.labels(result="ignored").inc()
            logger.debug(f"Received event different than interest, kind = {kind.value}")
            return UpcallResult.OK

        decoded, _ = self._process(components, count)
        if decoded is None:
            return UpcallResult.OK
        return UpcallResult.INTEREST_CONSUMED

    def handle_interest(self, components: Sequence,
                        count: Optional[int] = None) -> Optional[BandwidthSample]:
        """
        Decode and forward one interest name.

        Returns:
            The forwarded sample, or None if nothing was forwarded
        """
        return self._process(components, count)[1]

    def _process(self, components: Sequence, count: Optional[int]
                 ) -> Tuple[Optional[DecodedName], Optional[BandwidthSample]]:
        logger.debug(f"Received interest {name_decoder.format_name(components)}")

        decoded = name_decoder.decode(components, count=count, tag=self.tag)
        if decoded is None:
            INTERESTS.labels(result="rejected").inc()
            return None, None

        sample = translate(decoded, self.table)
        if sample is None:
            INTERESTS.labels(result="unknown_link").inc()
            return decoded, None

        self.forwarder.forward(sample)
        INTERESTS.labels(result="forwarded").inc()
        return decoded, sample
