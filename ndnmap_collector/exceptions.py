"""
Exceptions raised by the ndnmap collector.
"""


class CollectorError(Exception):
    """Base class for collector errors."""


class MalformedLineError(CollectorError):
    """A link table line does not read as '<id> <source addr> <dest addr>'."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason


class LinkTableError(CollectorError):
    """The link table could not be loaded."""


class TransportError(CollectorError):
    """The NDN transport could not be reached or refused a registration."""


class ConfigError(CollectorError):
    """The configuration is invalid."""
