"""
Prometheus metrics for the ndnmap collector.
"""

import logging

from prometheus_client import Counter, Gauge, start_http_server

# Configure logging
logger = logging.getLogger(__name__)

# Prometheus metrics
INTERESTS = Counter('ndnmap_interests', 'Status interests received', ['result'])
FORWARDS = Counter('ndnmap_forwards', 'Bandwidth samples sent to the map server', ['outcome'])
FORWARD_PENDING = Gauge('ndnmap_forward_pending', 'Map server requests still in flight')
LINK_ENTRIES = Gauge('ndnmap_link_entries', 'Entries in the link table')


def start_metrics_server(port: int) -> bool:
    """
    Expose the metrics over HTTP.

    Args:
        port: Port to listen on, 0 disables the exporter

    Returns:
        True if the exporter was started
    """
    if not port:
        return False
    start_http_server(port)
    logger.info(f"Prometheus exporter listening on port {port}")
    return True
