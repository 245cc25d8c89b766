"""Tests for environment-driven configuration."""

from pathlib import Path

import pytest

from listenstats.config import ImportConfig
from listenstats.errors import ConfigurationError

ENV_VARS = [
    "LISTENSTATS_TOP_N",
    "LISTENSTATS_HEATMAP_DAYS",
    "LISTENSTATS_TIMEZONE",
    "LISTENSTATS_ALLOWED_SUFFIXES",
    "LISTENSTATS_LOG_LEVEL",
    "LISTENSTATS_DATA_DIR",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # set-then-delete so monkeypatch removes anything load_dotenv adds
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults(clean_env, tmp_path):
    config = ImportConfig.from_env()
    assert config.top_n == 10
    assert config.heatmap_days == 365
    assert config.timezone is None
    assert config.allowed_suffixes == (".csv", ".json")
    assert config.data_dir == tmp_path / "data"


def test_env_overrides(clean_env):
    clean_env.setenv("LISTENSTATS_TOP_N", "5")
    clean_env.setenv("LISTENSTATS_TIMEZONE", "Europe/Paris")
    clean_env.setenv("LISTENSTATS_ALLOWED_SUFFIXES", "csv, .JSON, .tsv")
    clean_env.setenv("LISTENSTATS_DATA_DIR", "/tmp/out")
    config = ImportConfig.from_env()
    assert config.top_n == 5
    assert config.timezone == "Europe/Paris"
    assert config.allowed_suffixes == (".csv", ".json", ".tsv")
    assert config.data_dir == Path("/tmp/out")


def test_dotenv_file(clean_env, tmp_path):
    (tmp_path / ".env").write_text("LISTENSTATS_HEATMAP_DAYS=30\n", encoding="utf-8")
    assert ImportConfig.from_env().heatmap_days == 30


def test_invalid_values(clean_env):
    clean_env.setenv("LISTENSTATS_TOP_N", "ten")
    with pytest.raises(ConfigurationError):
        ImportConfig.from_env()
    with pytest.raises(ConfigurationError):
        ImportConfig(top_n=0)


def test_setup_logging_sets_level():
    import logging
    from listenstats.errors import setup_logging

    logger = setup_logging("DEBUG")
    assert logger.name == "listenstats"
    assert logger.level == logging.DEBUG
    assert logger.handlers
    setup_logging("INFO")
    assert logger.level == logging.INFO
