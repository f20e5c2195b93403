"""
Centralized configuration management.

Every setting is read from the environment variable named after the field
in upper case (``rate_limit_per_minute`` -> ``RATE_LIMIT_PER_MINUTE``). The
encoding engine itself never reads the environment; only the API layer does.
"""
import os
import logging
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_ORIGINS = "http://localhost:3000,http://localhost:3001"


class Settings(BaseModel):
    """Validated API settings."""

    # Per-client request budget on the engine endpoints
    rate_limit_per_minute: int = Field(default=120, ge=1, le=10000, description="Requests per minute per client IP")
    request_timeout_seconds: int = Field(default=30, ge=1, le=600, description="Seconds before a request is aborted with 504")

    allowed_origins: str = Field(default=DEFAULT_ORIGINS, description="Comma-separated CORS origins")
    log_level: str = Field(default="INFO", description="Root log level")

    # Suggestion engine limits
    default_suggestion_limit: int = Field(default=3, ge=1, le=50, description="Suggestions returned when no limit is given")
    max_suggestion_limit: int = Field(default=20, ge=1, le=100, description="Upper bound for a requested suggestion limit")
    max_analysis_columns: int = Field(default=500, ge=1, description="Maximum column analyses accepted per request")

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}; got '{value}'")
        return level

    @property
    def allowed_origins_list(self) -> List[str]:
        """CORS origins with blanks dropped."""
        origins = (origin.strip() for origin in self.allowed_origins.split(","))
        return [origin for origin in origins if origin]

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables; unset ones keep their defaults."""
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = os.getenv(name.upper())
            if raw is not None and raw.strip():
                values[name] = raw.strip()
        return cls(**values)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info(
            "Configuration loaded",
            extra={"rate_limit_per_minute": _settings.rate_limit_per_minute, "log_level": _settings.log_level},
        )
    return _settings


def reload_settings() -> Settings:
    """Drop the cached settings and read the environment again."""
    global _settings
    _settings = None
    return get_settings()
