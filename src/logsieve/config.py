"""XDG directory management and configuration for logsieve."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import user_config_dir
from pydantic import ValidationError

from logsieve.models import AppConfig, FilterSpec

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """Get the logsieve config directory.

    Respects LOGSIEVE_CONFIG_DIR environment variable if set.
    """
    if override := os.environ.get("LOGSIEVE_CONFIG_DIR"):
        return Path(override)
    return Path(user_config_dir("logsieve"))


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def load_config() -> AppConfig:
    """Load application config from disk, returning defaults if not found or invalid."""
    path = get_config_path()
    if not path.exists():
        return AppConfig()
    try:
        data: dict[str, Any] = tomllib.loads(path.read_text())
        return AppConfig(**data)
    except (OSError, ValueError, TypeError, KeyError, ValidationError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return AppConfig()


def save_config(config: AppConfig) -> None:
    """Save application config to disk."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / "config.toml"
    path.write_bytes(tomli_w.dumps(config.model_dump()).encode())


def _name_of(encoded: str) -> str:
    return encoded.split(":", 1)[0]


def add_saved_filter(spec: FilterSpec) -> AppConfig:
    """Persist a filter, replacing a saved filter of the same name."""
    config = load_config()
    kept = [value for value in config.filters if _name_of(value) != spec.name]
    config = config.model_copy(update={"filters": [*kept, spec.encode()]})
    save_config(config)
    return config


def remove_saved_filter(name: str) -> AppConfig:
    """Remove a saved filter by name."""
    config = load_config()
    kept = [value for value in config.filters if _name_of(value) != name]
    if len(kept) == len(config.filters):
        msg = f"No saved filter named {name!r}"
        raise KeyError(msg)
    config = config.model_copy(update={"filters": kept})
    save_config(config)
    return config


def saved_filter_specs() -> list[FilterSpec]:
    """Decode saved filters, skipping entries that no longer parse."""
    specs: list[FilterSpec] = []
    for value in load_config().filters:
        try:
            specs.append(FilterSpec.decode(value))
        except ValueError as e:
            logger.warning("Skipping saved filter %r: %s", value, e)
    return specs
