"""
Module loading and directory walking - the resolver's file system capability.

The resolver never touches the file system directly; it goes through a
:class:`ModuleLoader`. :class:`FileSystemLoader` is the real implementation,
:class:`InMemoryLoader` lets the core run against a dict.

Loading rules (``FileSystemLoader.try_load``), for a place ``p``:

1. ``p`` itself, when it is a file with a supported suffix
2. ``p.py``, ``p.json``, ``p.yaml``, ``p.yml`` (see ``HauteSettings.suffixes``)
3. ``p/__init__.py`` (a package loads as one module)

Nothing found → ``NOT_FOUND``. A file that is found but fails to load
(syntax error, exception at import time, missing dependency, malformed
JSON/YAML) raises, unmodified.

Example::

    loader = FileSystemLoader()
    loaded = loader.try_load(Path("routes/health"))
    items = loader.walk(Path("routes"), recursive=True, exclude=r"^legacy/")
"""

from __future__ import annotations

import hashlib
import importlib.util
import json
import re
import sys
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from types import ModuleType
from typing import Any, Protocol

import yaml

from haute.core.config import HauteSettings, get_settings
from haute.core.logging import get_logger
from haute.binding.models import NOT_FOUND, LoadedModule, Predicate, WalkItem

logger = get_logger(__name__)

_MODULE_PREFIX = "_haute_modules"


class ModuleLoader(Protocol):
    """Capability the resolver uses to turn places into values."""

    def is_dir(self, path: Path) -> bool:
        """True when ``path`` can be walked."""
        ...

    def try_load(self, path: Path) -> LoadedModule | Any:
        """Load a single module, or return ``NOT_FOUND``."""
        ...

    def walk(
        self,
        directory: Path,
        *,
        recursive: bool = True,
        include: Predicate | None = None,
        exclude: Predicate | None = None,
    ) -> list[WalkItem]:
        """List the modules under ``directory`` in walk order."""
        ...


def matches(predicate: Predicate, basename: str, relative_path: str) -> bool:
    """
    Evaluate an include/exclude predicate.

    Patterns (``str`` or compiled) are searched in ``relative_path``;
    functions receive ``(basename, relative_path)``.

    >>> matches(r"\\.json$", "a.json", "sub/a.json")
    True
    >>> matches(lambda name, path: name.startswith("x"), "a.py", "a.py")
    False
    """
    if isinstance(predicate, re.Pattern):
        return predicate.search(relative_path) is not None
    if isinstance(predicate, str):
        return re.search(predicate, relative_path) is not None
    if callable(predicate):
        return bool(predicate(basename, relative_path))
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def _strip_suffix(relative_path: str) -> str:
    path = PurePosixPath(relative_path)
    return str(path.with_suffix("")) if path.suffix else relative_path


class FileSystemLoader:
    """
    Loads Python, JSON and YAML modules from disk.

    Python modules are executed fresh on every load; their exported value is
    the module attribute named by ``export_name`` (None when absent).
    """

    def __init__(self, settings: HauteSettings | None = None):
        settings = settings or get_settings()
        self.export_name = settings.export_name
        self.suffixes = tuple(settings.suffixes)
        self.skip_private = settings.skip_private

    # ── Single modules ───────────────────────────────────────────────

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def find(self, path: Path) -> Path | None:
        """Return the file ``path`` resolves to, or None."""
        path = Path(path)

        if path.is_file() and path.suffix in self.suffixes:
            return path

        for suffix in self.suffixes:
            candidate = path.with_name(path.name + suffix)
            if candidate.is_file():
                return candidate

        if ".py" in self.suffixes:
            index = path / "__init__.py"
            if index.is_file():
                return index

        return None

    def try_load(self, path: Path) -> LoadedModule | Any:
        found = self.find(path)
        if found is None:
            logger.debug("loader.not_found", path=str(path))
            return NOT_FOUND

        logger.debug("loader.load", path=str(found))
        return LoadedModule(value=self.load_file(found), path=found)

    def load_file(self, path: Path) -> Any:
        """Load ``path`` according to its suffix; errors propagate."""
        if path.suffix == ".json":
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)

        if path.suffix in (".yaml", ".yml"):
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)

        module = self._exec_module(path)
        return getattr(module, self.export_name, None)

    def _exec_module(self, path: Path) -> ModuleType:
        path = path.resolve()
        digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
        name = f"{_MODULE_PREFIX}.m{digest}"

        if path.name == "__init__.py":
            spec = importlib.util.spec_from_file_location(
                name, path, submodule_search_locations=[str(path.parent)]
            )
        else:
            spec = importlib.util.spec_from_file_location(name, path)

        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load module from: {path}")

        module = importlib.util.module_from_spec(spec)
        # Registered so dataclasses and relative imports can find the module
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(name, None)
            raise
        return module

    # ── Directories ──────────────────────────────────────────────────

    def walk(
        self,
        directory: Path,
        *,
        recursive: bool = True,
        include: Predicate | None = None,
        exclude: Predicate | None = None,
    ) -> list[WalkItem]:
        directory = Path(directory)
        items: list[WalkItem] = []
        self._walk(directory, PurePosixPath(), items, recursive, include, exclude)

        logger.debug(
            "loader.walked",
            directory=str(directory),
            items=len(items),
            recursive=recursive,
        )
        return items

    def _walk(
        self,
        directory: Path,
        prefix: PurePosixPath,
        items: list[WalkItem],
        recursive: bool,
        include: Predicate | None,
        exclude: Predicate | None,
    ) -> None:
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if self.skip_private and entry.name.startswith((".", "_")):
                continue

            relative = str(prefix / entry.name)

            if exclude is not None and matches(exclude, entry.name, relative):
                continue

            if entry.is_dir():
                if (entry / "__init__.py").is_file() and ".py" in self.suffixes:
                    module_file = entry / "__init__.py"
                elif recursive:
                    self._walk(entry, prefix / entry.name, items, recursive, include, exclude)
                    continue
                else:
                    continue
            elif entry.suffix in self.suffixes:
                module_file = entry
            else:
                continue

            if include is not None and not matches(include, entry.name, relative):
                continue

            stripped = _strip_suffix(relative) if entry.is_file() else relative
            items.append(
                WalkItem(
                    value=self.load_file(module_file),
                    path=module_file,
                    relative_path=stripped,
                    basename=PurePosixPath(stripped).name,
                )
            )


class InMemoryLoader:
    """
    Loader backed by a mapping of POSIX paths to values.

    Keys are paths relative to ``root`` without suffixes, e.g.
    ``{"routes/health": {...}}``. A key that is a strict prefix of other
    keys acts as a directory.
    """

    def __init__(self, modules: Mapping[str, Any], root: str | Path = "/memory"):
        self.root = PurePosixPath(root)
        self.modules = {str(PurePosixPath(k)): v for k, v in modules.items()}

    def _key(self, path: Path) -> str | None:
        """Key for ``path``; ``"."`` for the root, None outside it."""
        posix = PurePosixPath(Path(path).as_posix())
        if posix != self.root and self.root not in posix.parents:
            return None
        return str(posix.relative_to(self.root))

    def is_dir(self, path: Path) -> bool:
        key = self._key(path)
        if key is None:
            return False
        if key == ".":
            return True
        return any(k.startswith(f"{key}/") for k in self.modules)

    def try_load(self, path: Path) -> LoadedModule | Any:
        key = self._key(path)
        if key is None or key not in self.modules:
            return NOT_FOUND
        return LoadedModule(value=self.modules[key], path=Path(self.root / key))

    def walk(
        self,
        directory: Path,
        *,
        recursive: bool = True,
        include: Predicate | None = None,
        exclude: Predicate | None = None,
    ) -> list[WalkItem]:
        base = self._key(directory)
        if base is None:
            return []
        prefix = "" if base == "." else f"{base}/"

        items = []
        for key in sorted(self.modules):
            if not key.startswith(prefix):
                continue
            relative = key[len(prefix):]
            if not recursive and "/" in relative:
                continue
            basename = PurePosixPath(relative).name
            if exclude is not None and _any_segment(exclude, relative):
                continue
            if include is not None and not matches(include, basename, relative):
                continue
            items.append(
                WalkItem(
                    value=self.modules[key],
                    path=Path(self.root / key),
                    relative_path=relative,
                    basename=basename,
                )
            )
        return items


def _any_segment(predicate: Predicate, relative: str) -> bool:
    """Exclude check applied to every ancestor, mirroring directory pruning."""
    parts = PurePosixPath(relative).parts
    for i in range(1, len(parts) + 1):
        partial = "/".join(parts[:i])
        if matches(predicate, parts[i - 1], partial):
            return True
    return False


__all__ = ["ModuleLoader", "FileSystemLoader", "InMemoryLoader", "matches"]
