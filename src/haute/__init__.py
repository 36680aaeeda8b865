"""
Haute - bind a directory of argument files onto method calls.

A manifest says which file or directory feeds which method of a host
object. Haute resolves each entry to concrete arguments and calls the
methods in manifest order::

    from haute import haute

    bind = haute("server", [
        {"place": "plugins", "method": "register", "list": True},
        {"place": "routes", "method": "route", "list": True,
         "use_filename": lambda route, name, path: {**route, "name": name}},
    ], dirname="app/closet")

    await bind(server, options)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from haute.binding import (
    Bone,
    Call,
    CallExecutor,
    CallResolver,
    FileSystemLoader,
    InMemoryLoader,
    Lazy,
    Literal,
    ModuleLoader,
    resolve,
    run,
    run_sync,
)
from haute.core.errors import (
    ConfigError,
    DirectoryNotFoundError,
    HauteError,
    InvalidInstanceNameError,
    ManifestError,
    MethodNotFoundError,
)

__version__ = "4.0.0"


def haute(
    instance_name: str,
    manifest: Iterable[Bone | Mapping[str, Any]],
    *,
    dirname: str | Path | None = None,
    loader: ModuleLoader | None = None,
) -> Callable[..., Awaitable[None]]:
    """
    Build a binder for ``manifest``.

    The instance label, the bones and every base directory are checked here,
    before anything is returned. The returned coroutine function resolves
    the manifest fresh on every invocation and then executes the calls
    against the given instance. ``bind.sync(...)`` does the same from
    synchronous code.

    Raises:
        InvalidInstanceNameError: If instance_name is not a non-empty string
        DirectoryNotFoundError: If a referenced base directory is missing
        ManifestError: If a bone is malformed or has no base directory
    """
    resolver = CallResolver(loader=loader, dirname=dirname)
    manifest = resolver.validate(instance_name, manifest)
    executor = CallExecutor()

    async def bind(instance: Any, *options: Any) -> None:
        calls = resolver.resolve(instance_name, manifest)
        await executor.run(calls, instance, *options)

    def sync(instance: Any, *options: Any) -> None:
        asyncio.run(bind(instance, *options))

    bind.sync = sync  # type: ignore[attr-defined]
    return bind


__all__ = [
    "__version__",
    "haute",
    "Bone",
    "Call",
    "Lazy",
    "Literal",
    "ModuleLoader",
    "FileSystemLoader",
    "InMemoryLoader",
    "CallResolver",
    "CallExecutor",
    "resolve",
    "run",
    "run_sync",
    "HauteError",
    "ConfigError",
    "DirectoryNotFoundError",
    "InvalidInstanceNameError",
    "ManifestError",
    "MethodNotFoundError",
]
