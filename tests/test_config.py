"""Tests for config.py: file loading, environment override, defaults."""

from __future__ import annotations

from pathlib import Path

import pytest

from dpservice_cli.config import (
    ADDRESS_ENV,
    CONFIG_FILE_ENV,
    DEFAULT_ADDRESS,
    DEFAULT_CONFIG_FILE,
    DEFAULT_CONNECT_TIMEOUT,
    CliConfig,
    config_path,
    load_config,
)
from dpservice_cli.exceptions import ConfigError


class TestConfigPath:
    def test_default(self) -> None:
        assert config_path({}) == DEFAULT_CONFIG_FILE

    def test_env_override(self, tmp_path: Path) -> None:
        path = tmp_path / "x.yaml"
        assert config_path({CONFIG_FILE_ENV: str(path)}) == path


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "absent.yaml", environ={})
        assert config == CliConfig()
        assert config.address == DEFAULT_ADDRESS
        assert config.connect_timeout == DEFAULT_CONNECT_TIMEOUT
        assert config.output is None

    def test_reads_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("address: dp.example:1337\nconnect_timeout: 10\noutput: json\n")
        config = load_config(path, environ={})
        assert config == CliConfig(address="dp.example:1337", connect_timeout=10.0, output="json")

    def test_env_address_overrides_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("address: from-file:1337\n")
        config = load_config(path, environ={ADDRESS_ENV: "from-env:1337"})
        assert config.address == "from-env:1337"

    def test_file_location_from_env(self, isolated_config: Path) -> None:
        isolated_config.write_text("address: via-env-file:1\n")
        assert load_config().address == "via-env-file:1"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path, environ={}) == CliConfig()

    def test_non_mapping_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path, environ={})

    def test_malformed_yaml_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("address: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to load"):
            load_config(path, environ={})

    def test_known_output_is_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("output: yaml\n")
        assert load_config(path, environ={}).output == "yaml"

    def test_unknown_output_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("output: xml\n")
        with pytest.raises(ConfigError, match="xml") as exc_info:
            load_config(path, environ={})
        assert "table" in (exc_info.value.hint or "")

    def test_bad_timeout_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("connect_timeout: soon\n")
        with pytest.raises(ConfigError, match="connect_timeout"):
            load_config(path, environ={})
