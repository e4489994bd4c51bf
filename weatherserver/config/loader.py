"""YAML config loader and dotted-key lookup."""

import hashlib
from pathlib import Path
from typing import Any

import yaml

from weatherserver.config.schema import ServiceConfig


def load_config(path: str | Path | None = None) -> ServiceConfig:
    """Load and validate config from a YAML file.

    With no path, or an empty file, every section takes its defaults.
    """
    if path is None:
        return ServiceConfig()

    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return ServiceConfig(**raw)


def config_hash(config: ServiceConfig) -> str:
    """Compute a deterministic SHA256 hash of the config."""
    data = config.model_dump_json(indent=None)
    return hashlib.sha256(data.encode()).hexdigest()[:16]


def get_config_value(config: ServiceConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'upstream.deadline_seconds'."""
    obj: Any = config
    for part in dotted_key.split("."):
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict) and part in obj:
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj
