"""
Tests for the map server forwarder.
"""
import logging
import threading

import pytest
import requests

from ndnmap_collector.forwarder import Forwarder, build_url
from ndnmap_collector.metrics import FORWARDS
from ndnmap_collector.models import BandwidthSample
from tests.helpers import MAP_SERVER, FakeSession

SAMPLE = BandwidthSample(link_id=3, timestamp="1000", tx_bits=1000, rx_bits=2000)


def test_build_url():
    assert build_url(SAMPLE, "128.252.153.27") == "http://128.252.153.27/bw/3/1000/1000/2000"


def test_build_url_with_port_and_odd_timestamp():
    sample = BandwidthSample(link_id=0, timestamp="12:00 /x", tx_bits=0, rx_bits=8)
    assert build_url(sample, "map:8080") == "http://map:8080/bw/0/12%3A00%20%2Fx/0/8"


def test_sample_link_id_must_not_be_negative():
    with pytest.raises(ValueError):
        BandwidthSample(link_id=-1, timestamp="", tx_bits=0, rx_bits=0)


def test_forward_sends_one_request(forwarder, session):
    future = forwarder.forward(SAMPLE)

    assert future.result(timeout=5) is True
    assert session.urls == [f"http://{MAP_SERVER}/bw/3/1000/1000/2000"]
    assert session.calls[0]["timeout"] == 1.0
    assert session.calls[0]["allow_redirects"] is True


def test_failed_request_is_not_raised():
    session = FakeSession(error=requests.ConnectionError("refused"))
    with Forwarder(endpoint=MAP_SERVER, session=session) as forwarder:
        future = forwarder.forward(SAMPLE)
        assert future.result(timeout=5) is False
    assert len(session.urls) == 1


def test_unexpected_session_error_is_logged_and_counted(caplog):
    errors = FORWARDS.labels(outcome="error")
    before = errors._value.get()
    session = FakeSession(error=ValueError("bad response"))

    with caplog.at_level(logging.WARNING, logger="ndnmap_collector.forwarder"):
        with Forwarder(endpoint=MAP_SERVER, session=session) as forwarder:
            future = forwarder.forward(SAMPLE)
            assert future.result(timeout=5) is False
            assert future.exception() is None
            forwarder.reap()

    assert errors._value.get() - before == 1
    assert any("bad response" in r.getMessage() for r in caplog.records)


def test_forward_outcomes_are_counted(forwarder):
    ok = FORWARDS.labels(outcome="ok")
    before = ok._value.get()

    forwarder.forward(SAMPLE).result(timeout=5)

    assert ok._value.get() - before == 1


def test_reap_forgets_finished_requests(forwarder):
    future = forwarder.forward(SAMPLE)
    future.result(timeout=5)

    forwarder.reap()
    assert forwarder.pending == 0


def test_samples_dropped_when_too_many_in_flight():
    gate = threading.Event()
    session = FakeSession(gate=gate)
    forwarder = Forwarder(endpoint=MAP_SERVER, max_workers=1, max_pending=1, session=session)
    try:
        first = forwarder.forward(SAMPLE)
        assert first is not None
        assert forwarder.forward(SAMPLE) is None
        assert forwarder.pending == 1

        gate.set()
        first.result(timeout=5)
        assert forwarder.forward(SAMPLE).result(timeout=5) is True
    finally:
        gate.set()
        forwarder.close()

    assert len(session.urls) == 2


def test_forward_after_close(session):
    forwarder = Forwarder(endpoint=MAP_SERVER, session=session)
    forwarder.close()

    with pytest.raises(RuntimeError):
        forwarder.forward(SAMPLE)


def test_uses_requests_by_default(monkeypatch):
    session = FakeSession()
    monkeypatch.setattr(requests, "get", session.get)

    with Forwarder(endpoint=MAP_SERVER) as forwarder:
        forwarder.forward(SAMPLE).result(timeout=5)

    assert session.urls == [f"http://{MAP_SERVER}/bw/3/1000/1000/2000"]


@pytest.mark.parametrize("kwargs", [{"max_workers": 0}, {"max_pending": 0}])
def test_invalid_limits(kwargs):
    with pytest.raises(ValueError):
        Forwarder(endpoint=MAP_SERVER, **kwargs)
