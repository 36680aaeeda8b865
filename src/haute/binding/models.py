"""
Binding models - bones, call descriptors, and argument variants.

These are pure data structures with no file system access and no execution.

Design Principles:
- Immutable (frozen dataclasses); a resolver run builds a fresh plan
- No business logic (that lives in resolver/executor)
- ``Lazy`` / ``Literal`` make the "call me at run time" decision explicit
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from haute.core.errors import ManifestError

# A predicate is either a pattern tested against the relative path or a
# function taking (basename, relative_path).
Predicate = Union[str, re.Pattern, Callable[[str, str], bool]]


class _NotFound:
    """Sentinel type for "nothing loadable at this path"."""

    _instance: _NotFound | None = None

    def __new__(cls) -> _NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()


@dataclass(frozen=True)
class Lazy:
    """
    An argument produced at call time.

    ``fn`` receives ``(instance, *options)``; its (possibly awaitable)
    return value becomes the real argument.
    """

    fn: Callable[..., Any]

    def __post_init__(self):
        if not callable(self.fn):
            raise TypeError(f"Lazy expects a callable, got {type(self.fn).__name__}")


@dataclass(frozen=True)
class Literal:
    """An argument passed through as-is, even when it is callable."""

    value: Any


def as_argument(value: Any) -> Any:
    """
    Normalize an exported value into an argument.

    ``Literal`` is unwrapped, ``Lazy`` is kept. Unwrapped plain functions and
    coroutine functions become ``Lazy``; classes and other callables stay
    literal.

    >>> as_argument(Literal(len)) is len
    True
    >>> isinstance(as_argument(lambda instance: 1), Lazy)
    True
    >>> as_argument(dict) is dict
    True
    """
    if isinstance(value, Literal):
        return value.value
    if isinstance(value, Lazy):
        return value
    if inspect.isfunction(value) or inspect.iscoroutinefunction(value):
        return Lazy(value)
    return value


def as_element(value: Any) -> Any:
    """
    Normalize one element of a materialised list.

    Only explicit wrappers count: ``Literal`` is unwrapped, ``Lazy`` is kept,
    and plain functions stay literal.

    >>> as_element(Literal(len)) is len
    True
    >>> callable(as_element(lambda instance: 1))
    True
    """
    if isinstance(value, Literal):
        return value.value
    return value


@dataclass(frozen=True)
class LoadedModule:
    """A single loaded module: its exported value and the file it came from."""

    value: Any
    path: Path


@dataclass(frozen=True)
class WalkItem:
    """
    One module discovered while walking a directory.

    ``relative_path`` and ``basename`` have the file suffix stripped; they
    are what ``use_filename`` callbacks receive.
    """

    value: Any
    path: Path
    relative_path: str
    basename: str


@dataclass(frozen=True)
class Bone:
    """
    One manifest entry.

    Attributes:
        place: Path of a file or directory, relative to ``dirname``
        method: Dotted method path on the host instance, or a callable
                taking ``(instance, *options, *args)``
        list: One call per element (or per file, for directories)
        signature: Field names destructured into positional arguments;
                   ``"[name]"`` marks an optional field
        use_filename: ``(value, filename, relative_path) -> value`` applied
                      to directory-sourced items
        recursive: Descend into subdirectories when walking
        include: Keep only matching items (pattern or predicate)
        exclude: Drop matching items (pattern or predicate)
        dirname: Base directory ``place`` is resolved against
        meta: Opaque pass-through metadata
    """

    place: str
    method: str | Callable[..., Any]
    list: bool = False
    signature: tuple[str, ...] | None = None
    use_filename: Callable[[Any, str, str], Any] | None = None
    recursive: bool = True
    include: Predicate | None = None
    exclude: Predicate | None = None
    dirname: str | Path | None = None
    meta: Any = None

    def __post_init__(self):
        if not isinstance(self.place, str) or not self.place:
            raise ManifestError(f"Bone place must be a non-empty string, got {self.place!r}", field="place")

        if isinstance(self.method, str):
            if not self.method:
                raise ManifestError("Bone method must not be empty", field="method")
        elif not callable(self.method):
            raise ManifestError(
                f"Bone method must be a dotted path or a callable, got {type(self.method).__name__}",
                field="method",
            )

        if self.signature is not None:
            if isinstance(self.signature, str) or not all(isinstance(s, str) for s in self.signature):
                raise ManifestError("Bone signature must be a sequence of field names", field="signature")
            object.__setattr__(self, "signature", tuple(self.signature))

        if self.use_filename is not None and not callable(self.use_filename):
            raise ManifestError("Bone use_filename must be callable", field="use_filename")

    @property
    def method_name(self) -> str:
        """Readable name of the target, for logs and attribution."""
        if isinstance(self.method, str):
            return self.method
        return getattr(self.method, "__qualname__", None) or repr(self.method)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Bone:
        """Create from a manifest mapping (``useFilename`` is accepted as an alias)."""
        if not isinstance(data, Mapping):
            raise ManifestError(f"Expected a mapping for a bone, got {type(data).__name__}")

        data = dict(data)
        if "useFilename" in data:
            data["use_filename"] = data.pop("useFilename")

        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ManifestError(f"Unknown bone keys: {sorted(unknown)}", field=sorted(unknown)[0])
        if "place" not in data or "method" not in data:
            raise ManifestError("A bone needs both 'place' and 'method'")

        return cls(**data)

    @classmethod
    def coerce(cls, value: Bone | Mapping[str, Any]) -> Bone:
        """Accept a ``Bone`` or a mapping."""
        if isinstance(value, Bone):
            return value
        return cls.from_dict(value)


@dataclass(frozen=True)
class Call:
    """
    A resolved, not-yet-executed call.

    Attributes:
        instance_name: Label used in error messages
        method: Copied from the bone
        signature: Copied from the bone
        args: Resolved argument, possibly still ``Lazy``
        file: File that produced the argument
        place: Manifest place the call came from
        use_filename: Per-item ``value -> value`` closure, or None
        list: The bone is list-oriented
        dir_file: The argument came from a directory walk
        element: The argument is one element of a materialised list
        evaluated: Lazy evaluation already happened (or must not happen)
    """

    instance_name: str
    method: str | Callable[..., Any]
    args: Any
    file: str
    place: str
    signature: tuple[str, ...] | None = None
    use_filename: Callable[[Any], Any] | None = None
    list: bool = False
    dir_file: bool = False
    element: bool = False
    evaluated: bool = False
    meta: Any = field(default=None, compare=False)

    @property
    def is_lazy(self) -> bool:
        """True when ``args`` still needs evaluating at call time."""
        return isinstance(self.args, Lazy) and not self.evaluated

    @property
    def expands(self) -> bool:
        """True when a list result of the lazy argument fans out into sub-calls."""
        return self.list and not self.dir_file and not self.element

    @property
    def method_name(self) -> str:
        if isinstance(self.method, str):
            return self.method
        return getattr(self.method, "__qualname__", None) or repr(self.method)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary for inspection and display."""
        return {
            "instance_name": self.instance_name,
            "method": self.method_name,
            "direct": not isinstance(self.method, str),
            "signature": list(self.signature) if self.signature is not None else None,
            "args": _describe(self.args),
            "lazy": self.is_lazy,
            "file": self.file,
            "place": self.place,
            "list": self.list,
            "dir_file": self.dir_file,
            "use_filename": self.use_filename is not None,
        }


def _describe(args: Any) -> Any:
    if isinstance(args, Lazy):
        return f"<lazy {getattr(args.fn, '__qualname__', repr(args.fn))}>"
    if isinstance(args, (str, int, float, bool)) or args is None:
        return args
    if isinstance(args, Mapping):
        return {str(k): _describe(v) for k, v in args.items()}
    if isinstance(args, Sequence):
        return [_describe(v) for v in args]
    return repr(args)


__all__ = [
    "NOT_FOUND",
    "Predicate",
    "Lazy",
    "Literal",
    "as_argument",
    "as_element",
    "LoadedModule",
    "WalkItem",
    "Bone",
    "Call",
]
