"""
Tests for configuration loading.
"""
import pytest

from ndnmap_collector.config import DEFAULT_CONFIG, load_config, validate_config
from ndnmap_collector.exceptions import ConfigError


def _valid_config(**link_table):
    config = load_config()
    config['link_table'].update({'path': 'links.txt', 'count': 2}, **link_table)
    return config


def test_defaults():
    config = load_config()

    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG
    assert config['forwarder']['endpoint'] == "128.252.153.27"
    assert config['monitoring']['prefix'] == "/ndn/wustl.edu/ndnstatus"


def test_sections_are_merged(tmp_path):
    path = tmp_path / "collector.yaml"
    path.write_text(
        "forwarder:\n"
        "  endpoint: map.example:8080\n"
        "link_table:\n"
        "  path: /etc/ndnmap/links.txt\n"
        "  count: 12\n"
    )

    config = load_config(str(path))

    assert config['forwarder']['endpoint'] == "map.example:8080"
    assert config['forwarder']['timeout'] == 5.0
    assert config['link_table'] == {'path': "/etc/ndnmap/links.txt", 'count': 12}
    assert DEFAULT_CONFIG['forwarder']['endpoint'] == "128.252.153.27"


def test_missing_file_uses_defaults(tmp_path):
    assert load_config(str(tmp_path / "missing.yaml")) == DEFAULT_CONFIG


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == DEFAULT_CONFIG


@pytest.mark.parametrize("text", ["- a\n- b\n", "forwarder: 3\n"])
def test_bad_layout(tmp_path, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text)

    with pytest.raises(ConfigError):
        load_config(str(path))


def test_validate_accepts_complete_config():
    validate_config(_valid_config())
    validate_config(_valid_config(count=None))


@pytest.mark.parametrize("link_table", [{'path': None}, {'count': 0}, {'count': "3"}])
def test_validate_link_table(link_table):
    with pytest.raises(ConfigError):
        validate_config(_valid_config(**link_table))


@pytest.mark.parametrize("key,value", [
    ('endpoint', ''),
    ('max_workers', 0),
    ('max_pending', None),
    ('timeout', 0),
])
def test_validate_forwarder(key, value):
    config = _valid_config()
    config['forwarder'][key] = value

    with pytest.raises(ConfigError):
        validate_config(config)


def test_validate_prefix():
    config = _valid_config()
    config['monitoring']['prefix'] = "ndn/wustl.edu"

    with pytest.raises(ConfigError):
        validate_config(config)
