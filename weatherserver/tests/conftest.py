"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
import yaml

from weatherserver.config.schema import ServiceConfig, UpstreamConfig

TEST_BASE_URL = "https://test-nws.example.com"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def points_payload(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "points_kc.json") as f:
        return json.load(f)


@pytest.fixture
def forecast_payload(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "forecast_kc.json") as f:
        return json.load(f)


@pytest.fixture
def service_config() -> ServiceConfig:
    """Default config pointed at the stand-in upstream."""
    return ServiceConfig(upstream=UpstreamConfig(base_url=TEST_BASE_URL))


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "server": {"host": "127.0.0.1", "port": 9090},
        "upstream": {"deadline_seconds": 1.5},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
