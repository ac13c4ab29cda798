"""
Shared fixtures for the collector tests.
"""
import pytest

from ndnmap_collector.forwarder import Forwarder
from ndnmap_collector.link_table import LinkTable
from tests.helpers import MAP_SERVER, FakeSession


@pytest.fixture
def table():
    return LinkTable.load(["3 10.0.0.1 10.0.0.2", "7 10.0.0.2 10.0.0.1"])


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def forwarder(session):
    fwd = Forwarder(endpoint=MAP_SERVER, timeout=1.0, max_workers=2, session=session)
    yield fwd
    fwd.close()
