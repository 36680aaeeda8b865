"""
Centralized settings for haute.

All fields can be set via ``HAUTE_*`` environment variables (e.g.
``HAUTE_EXPORT_NAME=manifest_value``) or through a ``.env`` file.

Tags:
    haute, configuration, settings, pydantic, caching
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HauteSettings(BaseSettings):
    """Haute configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HAUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Structlog log level")
    log_json: bool | None = Field(
        default=None, description="Force JSON logs (None = auto-detect from tty)"
    )

    # ── Module loading ───────────────────────────────────────────
    export_name: str = Field(
        default="exports",
        description="Module attribute holding a Python file's exported value",
    )
    suffixes: tuple[str, ...] = Field(
        default=(".py", ".json", ".yaml", ".yml"),
        description="Loadable file suffixes, in resolution order",
    )
    skip_private: bool = Field(
        default=True,
        description="Skip hidden and underscore-prefixed entries when walking directories",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return value

    @field_validator("suffixes")
    @classmethod
    def _dotted_suffixes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(s if s.startswith(".") else f".{s}" for s in value)


_settings_cache: dict[str, HauteSettings] = {}


def get_settings(*, _force_reload: bool = False) -> HauteSettings:
    """Load, validate, and cache a :class:`HauteSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = HauteSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (for testing)."""
    _settings_cache.clear()


__all__ = ["HauteSettings", "get_settings", "clear_settings_cache"]
