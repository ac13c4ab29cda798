"""
Transports delivering status interests to the collector.

NdnTransport talks to the local NFD through python-ndn. LoopbackTransport
keeps interests in an in-process queue; it backs the replay mode and the
tests.
"""

import asyncio
import logging
import queue
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import unquote_to_bytes

from ndn.app import NDNApp
from ndn.encoding import Component

from .dispatcher import UpcallKind, UpcallResult
from .exceptions import TransportError

# Configure logging
logger = logging.getLogger(__name__)

Handler = Callable[..., UpcallResult]
NameLike = Union[str, Sequence[Union[bytes, str]]]


def split_name(name: NameLike) -> List[bytes]:
    """
    Split a name into component values.

    Accepts a URI such as 'ndn:/ndn/wustl.edu/ndnstatus' (a 'ndn:' or
    'ccnx:' scheme is optional, components may be percent-encoded) or a
    sequence of components.
    """
    if isinstance(name, str):
        for scheme in ("ndn:", "ccnx:"):
            if name.startswith(scheme):
                name = name[len(scheme):]
                break
        return [unquote_to_bytes(part) for part in name.split('/') if part]

    return [part.encode('utf-8') if isinstance(part, str) else bytes(part) for part in name]


class Transport(ABC):
    """Interface the collector needs from an NDN transport."""

    @abstractmethod
    def set_interest_filter(self, prefix: str, handler: Handler) -> None:
        """
        Call ``handler(kind, components, count)`` for interests under ``prefix``.

        Raises:
            ValueError: If the prefix is not a valid name
        """

    @abstractmethod
    def run(self, timeout_ms: int) -> int:
        """
        Process pending events for up to ``timeout_ms`` milliseconds.

        Returns:
            A negative value once the transport has stopped
        """

    @abstractmethod
    def close(self) -> None:
        """Release the transport."""


class LoopbackTransport(Transport):
    """In-process transport fed by ``express``."""

    def __init__(self):
        self._filters: Dict[Tuple[bytes, ...], Handler] = {}
        self._queue: "queue.Queue[List[bytes]]" = queue.Queue()
        self._closed = False
        self.delivered = 0
        self.unmatched = 0

    def set_interest_filter(self, prefix: str, handler: Handler) -> None:
        key = tuple(split_name(prefix))
        if not key:
            raise ValueError(f"bad name: {prefix!r}")
        self._filters[key] = handler

    def express(self, name: NameLike) -> None:
        """Queue an interest for delivery by ``run``."""
        if self._closed:
            raise TransportError("Transport is closed")
        self._queue.put(split_name(name))

    def _match(self, components: List[bytes]) -> Optional[Handler]:
        best = None
        for prefix, handler in self._filters.items():
            if tuple(components[:len(prefix)]) != prefix:
                continue
            if best is None or len(prefix) > len(best[0]):
                best = (prefix, handler)
        return best[1] if best else None

    def run(self, timeout_ms: int) -> int:
        if self._closed:
            return -1

        try:
            components = self._queue.get(timeout=max(timeout_ms, 0) / 1000)
        except queue.Empty:
            return 0

        handled = 0
        while True:
            handler = self._match(components)
            if handler is None:
                self.unmatched += 1
                logger.debug(f"No interest filter for /{b'/'.join(components).decode('utf-8', 'replace')}")
            else:
                handler(UpcallKind.INTEREST, components, len(components) + 1)
                self.delivered += 1
            handled += 1

            try:
                components = self._queue.get_nowait()
            except queue.Empty:
                return handled

    @property
    def queued(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self._closed = True


class NdnTransport(Transport):
    """Transport on top of a python-ndn NDNApp connected to the local NFD."""

    def __init__(self, app=None):
        """
        Args:
            app: NDNApp to use, a default NDNApp is created if None

        Raises:
            TransportError: If the default NDNApp cannot be created
        """
        if app is None:
            try:
                app = NDNApp()
            except Exception as e:
                raise TransportError(f"Failed to create NDN application: {e}") from e
        self.app = app
        self.connected = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None

    def set_interest_filter(self, prefix: str, handler: Handler) -> None:
        def on_interest(name, param, app_param):
            components = [bytes(Component.get_value(c)) for c in name]
            try:
                handler(UpcallKind.INTEREST, components, len(components) + 1)
            except Exception as e:
                logger.exception(f"Error handling interest under {prefix}: {e}")

        # Routes set before the face is up are registered on connection
        self.app.route(prefix)(on_interest)

    async def _after_start(self) -> None:
        self.connected = True
        logger.info("Connected to NFD")

    def run(self, timeout_ms: int) -> int:
        if self._loop is None:
            self._loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self._loop)
            self._task = self._loop.create_task(
                self.app.main_loop(after_start=self._after_start())
            )

        if not self._task.done():
            self._loop.run_until_complete(asyncio.sleep(timeout_ms / 1000))

        if not self._task.done():
            return 0

        error = self._task.exception()
        if not self.connected:
            raise TransportError(f"Could not connect to NFD: {error or 'connection refused'}")
        if error is not None:
            logger.error(f"NDN face stopped: {error}")
        return -1

    def close(self) -> None:
        if self._loop is None:
            return
        if self._task is not None and not self._task.done():
            self.app.shutdown()
            try:
                self._loop.run_until_complete(asyncio.wait_for(self._task, timeout=2.0))
            except asyncio.TimeoutError:
                logger.warning("NDN face did not shut down in time")
            except Exception as e:
                logger.error(f"NDN face stopped with error: {e}")
        self._loop.close()
        self._loop = None
