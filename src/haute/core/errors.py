"""
Structured error types for haute.

Haute distinguishes three kinds of failure:

- **Configuration errors** (``ConfigError`` and subclasses): a bad base
  directory, a bad instance label, a method path that does not name a
  callable. Raised synchronously, never retried.
- **Load errors**: a module exists but fails to import (syntax error,
  missing dependency). These are *not* wrapped; the original exception
  reaches the caller unmodified.
- **Invocation errors**: anything raised by a target method or a
  directly-supplied callable. The original exception is kept, but its
  message is prefixed with an attribution tag via :func:`tag_error`.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────┐
        │                      HauteError                          │
        │          (category, context, cause)                      │
        ├─────────────────────────────────────────────────────────┤
        │  ConfigError (CONFIG)          ManifestError (MANIFEST)  │
        │    ├── DirectoryNotFoundError                            │
        │    ├── InvalidInstanceNameError                          │
        │    └── MethodNotFoundError                               │
        └─────────────────────────────────────────────────────────┘

Examples:
    >>> error = DirectoryNotFoundError("/srv/missing")
    >>> error.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> str(error)
    'Directory "/srv/missing" does not exist.'

Tags:
    error-handling, exception-hierarchy, attribution, haute
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    CONFIG = "CONFIG"             # Bad directory, instance label, method path
    MANIFEST = "MANIFEST"         # Malformed bone
    INVOCATION = "INVOCATION"     # Target method failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a haute error.

    Attributes:
        instance_name: Label of the host instance the manifest targets
        method: Dotted method path or callable name
        place: Manifest place the call was resolved from
        file: Resolved file path that produced the arguments
        metadata: Additional key-value pairs
    """

    instance_name: str | None = None
    method: str | None = None
    place: str | None = None
    file: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["instance_name", "method", "place", "file"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class HauteError(Exception):
    """
    Base exception for all haute errors.

    Subclasses set ``default_category`` to classify themselves.

    Examples:
        >>> error = HauteError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(instance_name="server").context.instance_name
        'server'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> HauteError:
        """Add context to this error (fluent API)."""
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS (fatal, never retried)
# =============================================================================


class ConfigError(HauteError):
    """Configuration error raised during resolution or just before invocation."""

    default_category = ErrorCategory.CONFIG


class DirectoryNotFoundError(ConfigError):
    """A base directory referenced by the manifest does not exist."""

    def __init__(self, dirname: str, **kwargs: Any):
        self.dirname = dirname
        super().__init__(f'Directory "{dirname}" does not exist.', **kwargs)


class InvalidInstanceNameError(ConfigError):
    """The instance label is not a non-empty string."""

    def __init__(self, instance_name: Any, **kwargs: Any):
        self.instance_name = instance_name
        super().__init__(
            f"Instance name must be a non-empty string, got {instance_name!r}.",
            **kwargs,
        )


class MethodNotFoundError(ConfigError):
    """A dotted method path does not resolve to a callable on the instance."""

    def __init__(self, instance_name: str, method: str, **kwargs: Any):
        self.instance_name = instance_name
        self.method = method
        super().__init__(
            f'"{instance_name}.{method}" is not a method on the passed instance.',
            **kwargs,
        )
        self.with_context(instance_name=instance_name, method=method)


class ManifestError(HauteError):
    """A manifest entry fails the minimal shape assertions."""

    default_category = ErrorCategory.MANIFEST

    def __init__(self, message: str, field: str | None = None, **kwargs: Any):
        self.field = field
        super().__init__(message, **kwargs)


# =============================================================================
# ATTRIBUTION
# =============================================================================


def tag_error(error: BaseException, tag: str) -> BaseException:
    """
    Prefix ``error``'s message with an attribution tag, in place.

    The tag becomes the whole message when the original has none, otherwise
    tag and message are joined with ``": "``. The same exception object is
    returned so callers can re-raise it with its type and traceback intact.
    Exceptions whose ``__str__`` does not render ``args`` get the tag
    attached as a note instead, so it still shows in the traceback.

    Examples:
        >>> str(tag_error(ValueError("boom"), "app.route() called by haute using /x.py"))
        'app.route() called by haute using /x.py: boom'
        >>> str(tag_error(ValueError(), "app.route() called by haute using /x.py"))
        'app.route() called by haute using /x.py'
    """
    original = _message_of(error)
    tagged = f"{tag}: {original}" if original else tag

    error.args = (tagged,)
    if isinstance(error, HauteError):
        error.message = tagged

    # Exceptions that render their own __str__ ignore args
    if tag not in str(error):
        error.add_note(tag)

    return error


def _message_of(error: BaseException) -> str:
    if isinstance(error, HauteError):
        return error.message
    if len(error.args) == 1 and isinstance(error.args[0], str):
        return error.args[0]
    return str(error) if error.args else ""


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "HauteError",
    "ConfigError",
    "DirectoryNotFoundError",
    "InvalidInstanceNameError",
    "MethodNotFoundError",
    "ManifestError",
    "tag_error",
]
