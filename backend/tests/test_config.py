"""
Tests for environment-driven settings.
"""
import pytest
from pydantic import ValidationError
from chartadvisor.core.config import Settings, get_settings, reload_settings


@pytest.fixture
def fresh_settings():
    """Reload settings around a test so environment changes stay local."""
    yield reload_settings
    reload_settings()


@pytest.mark.unit
def test_defaults():
    """Test the values used when nothing is configured."""
    settings = Settings()

    assert settings.rate_limit_per_minute == 120
    assert settings.request_timeout_seconds == 30
    assert settings.log_level == "INFO"
    assert (settings.default_suggestion_limit, settings.max_suggestion_limit) == (3, 20)
    assert settings.max_analysis_columns == 500
    assert settings.allowed_origins_list == ["http://localhost:3000", "http://localhost:3001"]


@pytest.mark.unit
def test_environment_overrides(monkeypatch, fresh_settings):
    """Test each field reads the upper-cased variable of the same name."""
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "20")
    monkeypatch.setenv("DEFAULT_SUGGESTION_LIMIT", " 5 ")
    monkeypatch.setenv("LOG_LEVEL", "warning")

    settings = fresh_settings()

    assert settings.rate_limit_per_minute == 20
    assert settings.default_suggestion_limit == 5
    assert settings.log_level == "WARNING"


@pytest.mark.unit
def test_blank_variable_keeps_default(monkeypatch, fresh_settings):
    """Test an empty variable is treated as unset."""
    monkeypatch.setenv("MAX_SUGGESTION_LIMIT", "   ")
    assert fresh_settings().max_suggestion_limit == 20


@pytest.mark.unit
@pytest.mark.parametrize("overrides", [
    {"rate_limit_per_minute": 0},
    {"request_timeout_seconds": 601},
    {"max_suggestion_limit": 101},
    {"max_analysis_columns": 0},
    {"log_level": "LOUD"},
])
def test_out_of_range_values_rejected(overrides):
    """Test bounds and log level names are enforced."""
    with pytest.raises(ValidationError):
        Settings(**overrides)


@pytest.mark.unit
def test_origins_split_and_trimmed():
    """Test the CORS list drops whitespace and empty entries."""
    settings = Settings(allowed_origins="https://a.example, https://b.example,")
    assert settings.allowed_origins_list == ["https://a.example", "https://b.example"]


@pytest.mark.unit
def test_settings_cached_until_reload(fresh_settings):
    """Test the same instance is returned until settings are reloaded."""
    first = get_settings()
    assert get_settings() is first
    assert fresh_settings() is not first
