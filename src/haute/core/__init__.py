"""Haute core primitives: errors, logging, settings."""

from haute.core.config import HauteSettings, get_settings
from haute.core.errors import (
    ConfigError,
    DirectoryNotFoundError,
    ErrorCategory,
    ErrorContext,
    HauteError,
    InvalidInstanceNameError,
    ManifestError,
    MethodNotFoundError,
    tag_error,
)
from haute.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    "HauteSettings",
    "get_settings",
    "ErrorCategory",
    "ErrorContext",
    "HauteError",
    "ConfigError",
    "DirectoryNotFoundError",
    "InvalidInstanceNameError",
    "ManifestError",
    "MethodNotFoundError",
    "tag_error",
    "LogContext",
    "configure_logging",
    "get_logger",
]
