"""Configuration management for dpservice-cli.

Settings are resolved with the following precedence (highest first):

1. Command-line options (applied by the CLI layer).
2. The ``DPSERVICE_ADDRESS`` environment variable (address only).
3. The YAML configuration file, ``DPSERVICE_CLI_CONFIG`` or
   ``~/.config/dpservice-cli/config.yaml``.
4. Built-in defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from dpservice_cli.exceptions import ConfigError

DEFAULT_ADDRESS = "localhost:1337"
DEFAULT_CONNECT_TIMEOUT = 4.0
DEFAULT_CONFIG_FILE = Path.home() / ".config" / "dpservice-cli" / "config.yaml"

ADDRESS_ENV = "DPSERVICE_ADDRESS"
CONFIG_FILE_ENV = "DPSERVICE_CLI_CONFIG"

OUTPUT_FORMATS: tuple[str, ...] = ("json", "yaml", "name", "table")


@dataclass(frozen=True, slots=True)
class CliConfig:
    """Connection and output defaults."""

    address: str = DEFAULT_ADDRESS
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    output: str | None = None
    """Default output format; ``None`` lets each verb pick its own."""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CliConfig:
        """Create from dictionary, keeping defaults for absent keys."""
        try:
            connect_timeout = float(data.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT))
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                f"Invalid connect_timeout: {data.get('connect_timeout')!r}",
            ) from exc
        output = str(data["output"]) if data.get("output") else None
        if output is not None and output not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Invalid output: {output!r}",
                hint=f"Use one of: {', '.join(OUTPUT_FORMATS)}",
            )
        return cls(
            address=str(data.get("address", DEFAULT_ADDRESS)),
            connect_timeout=connect_timeout,
            output=output,
        )


def config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return the configuration file location."""
    env = os.environ if environ is None else environ
    override = env.get(CONFIG_FILE_ENV)
    return Path(override) if override else DEFAULT_CONFIG_FILE


def load_config(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> CliConfig:
    """Load configuration from file and environment.

    A missing file yields defaults.

    Raises
    ------
    ConfigError
        If the file exists but cannot be read or is not a YAML mapping.
    """
    env = os.environ if environ is None else environ
    path = config_file if config_file is not None else config_path(env)

    data: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to load config from {path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {path} must contain a mapping.")
        data.update(loaded)

    if env.get(ADDRESS_ENV):
        data["address"] = env[ADDRESS_ENV]

    return CliConfig.from_dict(data)
