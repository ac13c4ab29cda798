"""
Link table for the ndnmap collector.

Maps a (source address, destination address) gateway pair to the link id
the map server uses. The table is read once at startup from a text file
with one ``<id> <source addr> <dest addr>`` entry per line and is
read-only afterwards.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from .exceptions import LinkTableError, MalformedLineError
from .metrics import LINK_ENTRIES
from .models import LinkEntry

# Configure logging
logger = logging.getLogger(__name__)


def parse_line(line: str) -> LinkEntry:
    """
    Parse one link table line.

    Args:
        line: Text of the form '<id> <source addr> <dest addr>'

    Returns:
        The parsed LinkEntry

    Raises:
        MalformedLineError: If the line has not exactly three tokens or the
            id is not a non-negative integer
    """
    tokens = line.split()
    if len(tokens) != 3:
        raise MalformedLineError(line, f"expected 3 fields, got {len(tokens)}")

    try:
        link_id = int(tokens[0])
    except ValueError:
        raise MalformedLineError(line, "link id is not an integer")
    if link_id < 0:
        raise MalformedLineError(line, "link id is negative")

    return LinkEntry(source_addr=tokens[1], dest_addr=tokens[2], link_id=link_id)


class LinkTable:
    """Ordered, immutable collection of LinkEntry records."""

    def __init__(self, entries: Iterable[LinkEntry] = (), skipped: int = 0):
        self._entries: Tuple[LinkEntry, ...] = tuple(entries)
        self.skipped = skipped

        seen = set()
        self.duplicates = 0
        for entry in self._entries:
            if entry.pair in seen:
                self.duplicates += 1
                logger.warning(
                    f"Duplicate link {entry.source_addr} -> {entry.dest_addr} "
                    f"(id {entry.link_id}) ignored, first entry wins"
                )
            seen.add(entry.pair)

    @classmethod
    def load(cls, lines: Iterable[str], count: Optional[int] = None) -> "LinkTable":
        """
        Build a table from link table lines.

        Blank lines, '#' comments and malformed lines are skipped and
        counted. Reading stops once ``count`` entries were collected.

        Args:
            lines: Lines of the link table file
            count: Number of entries to read, or None to read all lines

        Returns:
            The loaded LinkTable
        """
        entries: List[LinkEntry] = []
        skipped = 0

        for lineno, line in enumerate(lines, start=1):
            if count is not None and len(entries) >= count:
                break

            text = line.strip()
            if not text or text.startswith('#'):
                continue

            try:
                entries.append(parse_line(text))
            except MalformedLineError as e:
                skipped += 1
                logger.warning(f"Skipping link table line {lineno}: {e}")

        table = cls(entries, skipped=skipped)
        LINK_ENTRIES.set(len(table))
        logger.info(f"Loaded {len(table)} link entries ({skipped} lines skipped)")
        return table

    @classmethod
    def from_file(cls, path: str, count: Optional[int] = None) -> "LinkTable":
        """
        Load the table from a file.

        Args:
            path: Path to the link table file
            count: Number of entries the file must provide

        Raises:
            LinkTableError: If the file cannot be read or provides fewer
                usable entries than requested
        """
        try:
            with open(path, 'r') as f:
                table = cls.load(f, count=count)
        except OSError as e:
            raise LinkTableError(f"Cannot open link file {path}: {e}") from e

        if count is not None and len(table) < count:
            raise LinkTableError(
                f"Link file {path} has {len(table)} usable entries, {count} requested"
            )
        if not table:
            raise LinkTableError(f"Link file {path} has no usable entries")

        return table

    @property
    def entries(self) -> Tuple[LinkEntry, ...]:
        return self._entries

    def lookup(self, source_addr: str, dest_addr: str) -> Optional[int]:
        """
        Find the link id of a gateway pair.

        Returns:
            The id of the first matching entry, or None
        """
        for entry in self._entries:
            if entry.source_addr == source_addr and entry.dest_addr == dest_addr:
                return entry.link_id
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LinkEntry]:
        return iter(self._entries)

    def __contains__(self, pair) -> bool:
        return self.lookup(*pair) is not None
