"""Optional settings loader and logging configuration for applications."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import lru_cache
from typing import Any, Literal

import structlog
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from moov.credentials import DEFAULT_SCOPE

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class MoovSettings(BaseSettings):
    """Client settings loaded from ``MOOV_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="MOOV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    public_key: str = Field(min_length=1)
    secret_key: SecretStr
    domain: str = "api.moov.io"
    scope: str = DEFAULT_SCOPE
    timeout_seconds: float = Field(default=60.0, gt=0)
    log_level: LogLevel = "INFO"

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, value: SecretStr) -> SecretStr:
        """Reject blank secrets up front."""
        if not value.get_secret_value().strip():
            raise ValueError("secret_key must not be empty.")
        return value


def _timestamp(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Add an ISO 8601 UTC timestamp to each event."""
    event_dict.setdefault("timestamp", datetime.now(UTC).isoformat())
    return event_dict


def configure_logging(log_level: LogLevel = "INFO") -> None:
    """Configure structlog for JSON output at ``log_level``."""
    level = getattr(logging, log_level, logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _timestamp,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@lru_cache
def get_settings() -> MoovSettings:
    """Load and cache settings from the environment."""
    return MoovSettings()  # type: ignore[call-arg]
