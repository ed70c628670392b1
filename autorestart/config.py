from __future__ import annotations

from functools import lru_cache
from typing import Any

import structlog
from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_MIN_HANDLED_REQUESTS = 500
# A byte ceiling, compared against the process's virtual size.
DEFAULT_MAX_MEMORY_BYTES = 524_288_000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _warn_invalid(name: str, value: Any, fallback: Any) -> None:
    structlog.get_logger("autorestart.config").warning(
        "invalid_setting",
        setting=name,
        value=repr(value),
        fallback=fallback,
    )


class WatchdogConfig(BaseSettings):
    """Immutable watchdog settings, read once from the environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    active: bool = Field(default=False, alias="AUTORESTART_ACTIVE")
    check_interval: int | None = Field(default=None, alias="AUTORESTART_CHECK_INTERVAL")
    min_handled_requests: int = Field(
        default=DEFAULT_MIN_HANDLED_REQUESTS,
        alias="AUTORESTART_MIN_HANDLED_REQUESTS",
    )
    max_memory_bytes: int = Field(default=DEFAULT_MAX_MEMORY_BYTES, alias="AUTORESTART_MAX_MEMORY_BYTES")

    enable_status_endpoint: bool = Field(default=True, alias="AUTORESTART_ENABLE_STATUS_ENDPOINT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")

    @field_validator("active", "enable_status_endpoint", "log_json", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any, info: ValidationInfo) -> bool:
        default = cls.model_fields[info.field_name].default
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        text = str(value).strip().lower()
        if not text:
            return default
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        try:
            return int(text) != 0
        except ValueError:
            pass
        _warn_invalid(info.field_name, value, default)
        return default

    @field_validator("check_interval", "min_handled_requests", "max_memory_bytes", mode="before")
    @classmethod
    def _parse_count(cls, value: Any, info: ValidationInfo) -> int | None:
        default = cls.model_fields[info.field_name].default
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        try:
            if isinstance(value, bool):
                raise TypeError("booleans are not counts")
            parsed = int(value)
        except (TypeError, ValueError):
            _warn_invalid(info.field_name, value, default)
            return default

        minimum = 0 if info.field_name == "min_handled_requests" else 1
        if parsed < minimum:
            _warn_invalid(info.field_name, value, default)
            return default
        return parsed

    @model_validator(mode="after")
    def _require_interval_when_active(self) -> "WatchdogConfig":
        if self.active and self.check_interval is None:
            raise ValueError("AUTORESTART_CHECK_INTERVAL must be a positive integer when the watchdog is active")
        return self


@lru_cache(maxsize=1)
def get_settings() -> WatchdogConfig:
    return WatchdogConfig()
