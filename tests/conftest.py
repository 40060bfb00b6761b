"""Shared pytest fixtures and configuration for the dpservice-cli test suite.

Guidelines
----------
* No network access in any test; the RPC stub is mocked at the
  infra boundary.
* Core tests must be pure, with no side effects.
* Tests must not depend on the user's configuration file or environment.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dpservice_cli.config import ADDRESS_ENV, CONFIG_FILE_ENV
from dpservice_cli.core.dataplane_client import DataplaneClient


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the config loader at an empty temp location."""
    path = tmp_path / "config.yaml"
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    monkeypatch.delenv(ADDRESS_ENV, raising=False)
    return path


@pytest.fixture()
def stub() -> MagicMock:
    """A stand-in for :class:`GrpcDataplaneStub`; one mock per RPC method."""
    return MagicMock()


@pytest.fixture()
def client(stub: MagicMock) -> DataplaneClient:
    return DataplaneClient(stub)
