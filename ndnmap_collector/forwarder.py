"""
Forwarding of bandwidth samples to the ndnmap server.

Each sample becomes one HTTP GET on the map server:

    http://<endpoint>/bw/<link id>/<timestamp>/<tx bits>/<rx bits>

Requests run on a small thread pool so the interest handler never waits on
the network. Finished requests are reaped without blocking whenever a new
sample is forwarded, and the number of requests in flight is bounded.
"""

import logging
import threading
from concurrent import futures
from typing import Optional, Set
from urllib.parse import quote

import requests

from .metrics import FORWARDS, FORWARD_PENDING
from .models import BandwidthSample

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_MAP_SERVER = "128.252.153.27"


def build_url(sample: BandwidthSample, endpoint: str) -> str:
    """Build the map server URL reporting ``sample``."""
    timestamp = quote(sample.timestamp, safe='')
    return (f"http://{endpoint}/bw/{sample.link_id}/{timestamp}/"
            f"{sample.tx_bits}/{sample.rx_bits}")


class Forwarder:
    """Sends bandwidth samples to the map server without blocking the caller."""

    def __init__(self, endpoint: str = DEFAULT_MAP_SERVER, timeout: float = 5.0,
                 max_workers: int = 4, max_pending: int = 64, session=None):
        """
        Initialize the forwarder.

        Args:
            endpoint: Map server host, optionally with ':port'
            timeout: Timeout of each HTTP request in seconds
            max_workers: Number of worker threads
            max_pending: Maximum number of requests in flight; further
                samples are dropped until some complete
            session: Object with a requests-compatible ``get`` method,
                defaults to the requests module
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")

        self.endpoint = endpoint
        self.timeout = timeout
        self.max_pending = max_pending
        self._http = session if session is not None else requests
        self._executor = futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="ndnmap-forward"
        )
        self._pending: Set[futures.Future] = set()
        self._lock = threading.Lock()
        self._closed = False

        logger.info(f"Forwarding samples to http://{endpoint} "
                    f"({max_workers} workers, timeout {timeout}s)")

    @property
    def pending(self) -> int:
        """Number of requests not yet reaped."""
        with self._lock:
            return len(self._pending)

    def forward(self, sample: BandwidthSample) -> Optional[futures.Future]:
        """
        Send one sample to the map server.

        Returns:
            The future of the request, or None if the sample was dropped
            because too many requests are in flight
        """
        if self._closed:
            raise RuntimeError("Forwarder is closed")

        url = build_url(sample, self.endpoint)
        logger.debug(f"Forwarding {url}")

        self.reap()
        with self._lock:
            if len(self._pending) >= self.max_pending:
                FORWARDS.labels(outcome="overflow").inc()
                logger.warning(f"{len(self._pending)} map server requests in flight, "
                               f"dropping {url}")
                return None
            future = self._executor.submit(self._dispatch, url)
            self._pending.add(future)
            FORWARD_PENDING.set(len(self._pending))
        self.reap()
        return future

    def reap(self) -> int:
        """
        Forget requests that have completed.

        Never waits; requests still running are left alone.

        Returns:
            Number of requests reaped
        """
        with self._lock:
            done = {f for f in self._pending if f.done()}
            self._pending -= done
            FORWARD_PENDING.set(len(self._pending))
        return len(done)

    def _dispatch(self, url: str) -> bool:
        """Run one request on a worker thread."""
        try:
            response = self._http.get(url, timeout=self.timeout, allow_redirects=True)
            response.close()
        except requests.RequestException as e:
            FORWARDS.labels(outcome="error").inc()
            logger.warning(f"Failed to send {url}: {e}")
            return False
        except Exception as e:
            FORWARDS.labels(outcome="error").inc()
            logger.warning(f"Unexpected error sending {url}: {e}")
            return False

        FORWARDS.labels(outcome="ok").inc()
        logger.debug(f"Sent {url} (HTTP {response.status_code})")
        return True

    def close(self, wait: bool = True) -> None:
        """Stop accepting samples and shut down the worker threads."""
        self._closed = True
        self._executor.shutdown(wait=wait)
        self.reap()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
