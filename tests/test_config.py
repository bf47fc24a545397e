"""Tests for configuration loading."""

import pytest

from journalsync.config import Config, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "DB_PATH",
        "REMOTE_URL",
        "REMOTE_TIMEOUT",
        "PULL_ON_START",
        "ASSIGN_IDENTIFIERS",
    ):
        monkeypatch.delenv(f"JOURNALSYNC_{key}", raising=False)


def test_defaults():
    """Test defaults when no config file is given."""
    config = load_config()

    assert config == Config()
    assert config.remote.base_url == "https://journal-core-data.firebaseio.com/"
    assert config.remote.timeout_seconds == 30.0
    assert config.sync.pull_on_start is True
    assert config.sync.assign_identifiers is True


def test_missing_file_uses_defaults(tmp_path):
    """Test a missing config file falls back to defaults."""
    assert load_config(tmp_path / "absent.yaml") == Config()


def test_load_yaml(tmp_path):
    """Test loading sections from a YAML file."""
    path = tmp_path / "config.yaml"
    path.write_text(
        """
store:
  db_path: /tmp/journal.db
remote:
  base_url: https://example.firebaseio.com/entries
  timeout_seconds: 5
sync:
  pull_on_start: false
"""
    )

    config = load_config(path)

    assert config.store.db_path == "/tmp/journal.db"
    assert config.remote.base_url == "https://example.firebaseio.com/entries"
    assert config.remote.timeout_seconds == 5.0
    assert config.sync.pull_on_start is False
    assert config.sync.assign_identifiers is True


def test_empty_yaml(tmp_path):
    """Test an empty YAML file yields defaults."""
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_config(path) == Config()


def test_env_overrides(tmp_path, monkeypatch):
    """Test JOURNALSYNC_ environment variables override the file."""
    path = tmp_path / "config.yaml"
    path.write_text("remote:\n  base_url: https://from-file.example.com\n")
    monkeypatch.setenv("JOURNALSYNC_REMOTE_URL", "https://from-env.example.com")
    monkeypatch.setenv("JOURNALSYNC_REMOTE_TIMEOUT", "2.5")
    monkeypatch.setenv("JOURNALSYNC_PULL_ON_START", "no")
    monkeypatch.setenv("JOURNALSYNC_DB_PATH", ":memory:")

    config = load_config(path)

    assert config.remote.base_url == "https://from-env.example.com"
    assert config.remote.timeout_seconds == 2.5
    assert config.sync.pull_on_start is False
    assert config.store.db_path == ":memory:"
