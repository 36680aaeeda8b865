"""
Binding - manifest resolution and call execution.

Two phases, cleanly separated:

- :class:`CallResolver` turns a manifest plus base directories into a flat
  list of :class:`Call` descriptors. Nothing is invoked.
- :class:`CallExecutor` runs that list against a host instance, one call
  at a time.

The same plan can be inspected (``Call.to_dict()``) or replayed against
different instances.
"""

from haute.binding.executor import CallExecutor, run, run_sync
from haute.binding.loader import FileSystemLoader, InMemoryLoader, ModuleLoader, matches
from haute.binding.models import (
    NOT_FOUND,
    Bone,
    Call,
    Lazy,
    Literal,
    LoadedModule,
    WalkItem,
    as_argument,
    as_element,
)
from haute.binding.resolver import CallResolver, resolve
from haute.binding.signature import apply_signature, attribution, reach, resolve_method

__all__ = [
    # Models
    "NOT_FOUND",
    "Bone",
    "Call",
    "Lazy",
    "Literal",
    "LoadedModule",
    "WalkItem",
    "as_argument",
    "as_element",
    # Loading
    "ModuleLoader",
    "FileSystemLoader",
    "InMemoryLoader",
    "matches",
    # Resolution
    "CallResolver",
    "resolve",
    # Execution
    "CallExecutor",
    "run",
    "run_sync",
    # Helpers
    "apply_signature",
    "attribution",
    "reach",
    "resolve_method",
]
