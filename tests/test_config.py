import textwrap

import pytest

from streamverse.config import load_config


def test_loads_sources_filters_and_settings(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent("""
        sources:
          - name: fr
            url: http://x/fr.m3u8
          - name: provider
            type: xtream
            url: http://provider:8080
            username: u
            password: p
            include_vod: true
            enabled: false
            refresh_interval: 900
        verified_channels: https://x/verified.json
        filters:
          exclude_name_patterns: ["(?i)adult"]
        refresh_interval: 30
        bind_port: 9090
        log_level: DEBUG
    """))

    config = load_config(str(path))

    first, second = config.sources
    assert (first.name, first.type, first.refresh_interval, first.enabled) == ("fr", "m3u", 300, True)
    assert (second.type, second.username, second.password) == ("xtream", "u", "p")
    assert second.include_vod and not second.enabled
    assert second.refresh_interval == 900
    assert config.filters.exclude_name_patterns == ["(?i)adult"]
    assert config.filters.include_name_patterns == []
    assert config.verified_channels == "https://x/verified.json"
    assert config.refresh_interval == 30
    assert config.bind_host == "0.0.0.0"
    assert config.bind_port == 9090
    assert config.log_level == "DEBUG"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    config = load_config(str(path))

    assert config.sources == []
    assert config.verified_channels is None
    assert config.bind_port == 8080


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "absent.yaml"))


def test_loads_validation_settings(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent("""
        validation:
          max_concurrent: 2
          timeout: 3.5
    """))

    validation = load_config(str(path)).validation

    assert validation.max_concurrent == 2
    assert validation.timeout == 3.5
    assert validation.cache_expiry == 300
