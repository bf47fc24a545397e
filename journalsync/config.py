"""Configuration loading for journalsync."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class StoreConfig:
    db_path: str = "~/.journalsync/journal.db"


@dataclass
class RemoteConfig:
    """Configuration for the remote JSON entry store."""

    base_url: str = "https://journal-core-data.firebaseio.com/"
    timeout_seconds: float = 30.0


@dataclass
class SyncConfig:
    pull_on_start: bool = True
    assign_identifiers: bool = True  # Give new entries a UUID before the first push


@dataclass
class Config:
    store: StoreConfig = field(default_factory=StoreConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with JOURNALSYNC_ prefix."""
    return os.environ.get(f"JOURNALSYNC_{key}", default)


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    if db_path := _get_env("DB_PATH"):
        config.store.db_path = db_path

    if remote_url := _get_env("REMOTE_URL"):
        config.remote.base_url = remote_url
    if timeout := _get_env("REMOTE_TIMEOUT"):
        config.remote.timeout_seconds = float(timeout)

    if pull_on_start := _get_env("PULL_ON_START"):
        config.sync.pull_on_start = _parse_bool(pull_on_start)
    if assign := _get_env("ASSIGN_IDENTIFIERS"):
        config.sync.assign_identifiers = _parse_bool(assign)

    return config


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default config.

    Returns:
        Loaded Config object.
    """
    config = Config()

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

            if "store" in data:
                config.store = StoreConfig(
                    db_path=data["store"].get("db_path", config.store.db_path)
                )

            if "remote" in data:
                remote_data = data["remote"]
                config.remote = RemoteConfig(
                    base_url=remote_data.get("base_url", config.remote.base_url),
                    timeout_seconds=float(
                        remote_data.get("timeout_seconds", config.remote.timeout_seconds)
                    ),
                )

            if "sync" in data:
                sync_data = data["sync"]
                config.sync = SyncConfig(
                    pull_on_start=sync_data.get(
                        "pull_on_start", config.sync.pull_on_start
                    ),
                    assign_identifiers=sync_data.get(
                        "assign_identifiers", config.sync.assign_identifiers
                    ),
                )

    return _apply_env_overrides(config)
