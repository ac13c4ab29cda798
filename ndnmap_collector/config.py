"""
Configuration loading for the ndnmap collector.
"""

import copy
import logging
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigError
from .forwarder import DEFAULT_MAP_SERVER
from .name_decoder import MON_NAME_PREFIX, MONITORING_TAG

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'link_table': {
        'path': None,
        'count': None,
    },
    'monitoring': {
        'prefix': MON_NAME_PREFIX,
        'tag': MONITORING_TAG,
    },
    'forwarder': {
        'endpoint': DEFAULT_MAP_SERVER,
        'timeout': 5.0,
        'max_workers': 4,
        'max_pending': 64,
    },
    'metrics': {
        'prometheus_port': 0,
    },
    'logging': {
        'level': 'INFO',
    },
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Sections of the file are merged over the defaults. If the file cannot
    be read the defaults are used.

    Args:
        config_path: Path to the configuration file. If None, use default config.

    Returns:
        Dictionary containing the configuration.

    Raises:
        ConfigError: If the file does not hold a mapping of sections
    """
    merged_config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is None:
        return merged_config

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load configuration from {config_path}: {e}")
        logger.info("Using default configuration")
        return merged_config

    if config is None:
        return merged_config
    if not isinstance(config, dict):
        raise ConfigError(f"{config_path}: expected a mapping, got {type(config).__name__}")

    for section, values in config.items():
        if section in merged_config and isinstance(merged_config[section], dict):
            if not isinstance(values, dict):
                raise ConfigError(f"{config_path}: section '{section}' must be a mapping")
            merged_config[section].update(values)
        else:
            merged_config[section] = values

    return merged_config


def validate_config(config: Dict[str, Any]) -> None:
    """
    Check the values the collector depends on.

    Raises:
        ConfigError: If a value is missing or out of range
    """
    link_table = config['link_table']
    if not link_table.get('path'):
        raise ConfigError("No link file given")

    count = link_table.get('count')
    if count is not None and (not isinstance(count, int) or count < 1):
        raise ConfigError(f"number_of_linkids must be a positive integer, got {count!r}")

    forwarder = config['forwarder']
    if not forwarder.get('endpoint'):
        raise ConfigError("No map server address given")
    for key in ('max_workers', 'max_pending'):
        if not isinstance(forwarder.get(key), int) or forwarder[key] < 1:
            raise ConfigError(f"forwarder.{key} must be a positive integer")
    if not isinstance(forwarder.get('timeout'), (int, float)) or forwarder['timeout'] <= 0:
        raise ConfigError("forwarder.timeout must be a positive number")

    if not str(config['monitoring'].get('prefix', '')).startswith('/'):
        raise ConfigError("monitoring.prefix must be an absolute name")
