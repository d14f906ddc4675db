"""
Tests for environment-driven configuration.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from catalog.config import CatalogConfig


def test_defaults(monkeypatch):
    monkeypatch.delenv("MONGODB_DATABASE", raising=False)
    monkeypatch.delenv("LOG_FILE", raising=False)

    config = CatalogConfig(_env_file=None)

    assert config.mongodb_database == "local_library"
    assert config.get_log_file_path() is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_FORMAT", "CONSOLE")
    monkeypatch.setenv("LOG_FILE", "logs/catalog.log")

    config = CatalogConfig(_env_file=None)

    assert config.port == 9000
    assert config.log_level == "DEBUG"
    assert config.log_format == "console"
    assert config.get_log_file_path() == Path("logs/catalog.log")


@pytest.mark.parametrize("name, value", [
    ("LOG_LEVEL", "VERBOSE"),
    ("LOG_FORMAT", "xml"),
    ("PORT", "70000"),
])
def test_invalid_settings_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        CatalogConfig(_env_file=None)
