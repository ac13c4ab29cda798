"""
Helpers shared by the collector tests.
"""
import threading

MAP_SERVER = "map.example"


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code
        self.closed = False

    def close(self):
        self.closed = True


class FakeSession:
    """Records the URLs requested through it."""

    def __init__(self, error=None, gate=None):
        self.urls = []
        self.calls = []
        self.error = error
        self.gate = gate
        self._lock = threading.Lock()

    def get(self, url, **kwargs):
        if self.gate is not None:
            self.gate.wait(timeout=5)
        with self._lock:
            self.urls.append(url)
            self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return FakeResponse()


def status_name(source="10.0.0.1", dest="10.0.0.2", timestamp="1000", tx="125", rx="250",
                prefix=(b"ndn", b"wustl.edu", b"ndnstatus")):
    """Component values of a status interest name."""
    fields = []
    for value in (source, dest, timestamp, tx, rx):
        fields.append(value.encode("utf-8") if isinstance(value, str) else value)
    return list(prefix) + fields


