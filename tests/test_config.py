"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from app.config import Config, get_config


def test_get_config_reads_environment(monkeypatch, tmp_path):
    """Test that settings come from environment variables."""
    monkeypatch.setenv("ENVIRONMENT", "Production")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("TEMP_DIR", str(tmp_path / "scratch"))
    monkeypatch.setenv("DELETE_GRACE_DELAY", "0.5")
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    settings = get_config()

    assert settings.environment == "production"
    assert settings.log_level == "INFO"
    assert settings.port == 8080
    assert settings.temp_dir == tmp_path / "scratch"
    assert settings.delete_grace_delay == 0.5
    assert settings.max_duration_seconds == 1200


def test_config_fields_are_the_runtime_settings():
    assert "debug" not in Config.model_fields
    assert not hasattr(Config, "get_paths")


def test_config_is_frozen():
    settings = Config()

    with pytest.raises(ValidationError):
        settings.port = 9000


def test_initialize_creates_scratch_dir(tmp_path):
    settings = Config(temp_dir=tmp_path / "temp")

    settings.initialize()

    assert settings.temp_dir.is_dir()
