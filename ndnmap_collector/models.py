"""
Data models for the ndnmap collector.

All records are frozen: a decoded name or sample is never modified after
it is built, the next stage creates a new object instead.
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class LinkEntry:
    """One line of the link table: a gateway pair and its map link id."""
    source_addr: str
    dest_addr: str
    link_id: int

    @property
    def pair(self) -> Tuple[str, str]:
        return (self.source_addr, self.dest_addr)


@dataclass(frozen=True)
class DecodedName:
    """
    Fields extracted from a status interest name.

    A field whose name component could not be read keeps its default
    ("" or 0) and is listed in ``failed_fields``.
    """
    source_addr: str = ""
    dest_addr: str = ""
    timestamp: str = ""
    tx_text: str = ""
    rx_text: str = ""
    tx_bits: int = 0
    rx_bits: int = 0
    failed_fields: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.failed_fields, tuple):
            object.__setattr__(self, 'failed_fields', tuple(self.failed_fields))

    @property
    def complete(self) -> bool:
        """True if every field was extracted."""
        return not self.failed_fields


@dataclass(frozen=True)
class BandwidthSample:
    """Bandwidth report for one map link, ready to be forwarded."""
    link_id: int
    timestamp: str
    tx_bits: int
    rx_bits: int

    def __post_init__(self):
        if self.link_id < 0:
            raise ValueError(f"link_id must be >= 0, got {self.link_id}")
