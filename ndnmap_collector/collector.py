#!/usr/bin/env python3
"""
ndnmap Collector

Receives link status from the testbed gateways in the form of interests
named

    /ndn/wustl.edu/ndnstatus/<source addr>/<dest addr>/<timestamp>/<tx bytes>/<rx bytes>

and reports the bandwidth of every known link to the ndnmap server.
"""

import argparse
import logging
import sys
from typing import Any, Dict, Iterable, List, Optional

from .config import load_config, validate_config
from .dispatcher import InterestDispatcher
from .exceptions import CollectorError
from .forwarder import Forwarder
from .link_table import LinkTable
from .metrics import start_metrics_server
from .transport import LoopbackTransport, NdnTransport, Transport

logger = logging.getLogger(__name__)

# Event loop slices, in milliseconds
FIRST_RUN_MS = 200
RUN_MS = 333


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ndnmap-collector',
        description='Receives status info in form of interests from gateways.',
    )
    parser.add_argument('-f', '--link-file', dest='link_file',
                        help='name of file containing ip pairs associated with linkid')
    parser.add_argument('-n', '--count', type=int,
                        help='number_of_linkids supplied by the linkfile')
    parser.add_argument('-s', '--map-addr', dest='map_addr',
                        help='address of the ndnmap server')
    parser.add_argument('-c', '--config', help='YAML configuration file')
    parser.add_argument('--prometheus-port', type=int,
                        help='port of the Prometheus exporter (0 disables it)')
    parser.add_argument('--replay', metavar='FILE',
                        help='read interest names from FILE instead of connecting to NFD')
    parser.add_argument('--log-level', help='Logging level')
    return parser


def apply_arguments(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Override configuration values with the ones given on the command line."""
    if args.link_file is not None:
        config['link_table']['path'] = args.link_file
    if args.count is not None:
        config['link_table']['count'] = args.count
    if args.map_addr is not None:
        config['forwarder']['endpoint'] = args.map_addr
    if args.prometheus_port is not None:
        config['metrics']['prometheus_port'] = args.prometheus_port
    if args.log_level is not None:
        config['logging']['level'] = args.log_level
    return config


def run_loop(transport: Transport) -> None:
    """Run the transport until it stops."""
    res = transport.run(FIRST_RUN_MS)
    while res >= 0:
        res = transport.run(RUN_MS)


def replay(transport: LoopbackTransport, lines: Iterable[str]) -> int:
    """
    Deliver the interest names listed in ``lines``, one per line.

    Returns:
        Number of interests delivered
    """
    for line in lines:
        name = line.strip()
        if name and not name.startswith('#'):
            transport.express(name)

    delivered = 0
    while transport.queued:
        delivered += transport.run(0)
    return delivered


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = apply_arguments(load_config(args.config), args)
        validate_config(config)
    except CollectorError as e:
        logger.error(str(e))
        parser.print_usage(sys.stderr)
        return 1

    level = str(config['logging']['level']).upper()
    logging.getLogger().setLevel(getattr(logging, level, logging.INFO))

    link_config = config['link_table']
    forwarder_config = config['forwarder']
    monitoring_config = config['monitoring']

    try:
        table = LinkTable.from_file(link_config['path'], link_config['count'])
    except CollectorError as e:
        logger.error(str(e))
        return 1

    forwarder = Forwarder(
        endpoint=forwarder_config['endpoint'],
        timeout=forwarder_config['timeout'],
        max_workers=forwarder_config['max_workers'],
        max_pending=forwarder_config['max_pending'],
    )
    dispatcher = InterestDispatcher(
        table, forwarder,
        prefix=monitoring_config['prefix'],
        tag=monitoring_config['tag'],
    )

    transport: Optional[Transport] = None
    try:
        start_metrics_server(config['metrics']['prometheus_port'])

        if args.replay:
            transport = LoopbackTransport()
            dispatcher.register(transport)
            with open(args.replay, 'r') as f:
                delivered = replay(transport, f)
            logger.info(f"Replayed {delivered} interests")
        else:
            transport = NdnTransport()
            dispatcher.register(transport)
            run_loop(transport)
            logger.info("exit client...")
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except (CollectorError, OSError) as e:
        logger.error(str(e))
        return 1
    finally:
        if transport is not None:
            transport.close()
        forwarder.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
