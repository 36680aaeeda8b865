"""
Call Resolver - turns a manifest into an ordered list of calls.

This is the first half of the binding pipeline:
1. Validate the instance label and every base directory
2. Load each bone's place as a single module (file, data file, or package)
3. Fall back to walking the place as a directory for list bones
4. Skip bones that resolve to nothing (not an error)
5. Fan list values out into one call per element / per file
6. Return the plan; nothing is invoked here

Design Principles:
- No execution (that's for CallExecutor)
- All file system access goes through the injected ModuleLoader
- Output order = manifest order, then list / walk order
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from haute.core.errors import (
    DirectoryNotFoundError,
    InvalidInstanceNameError,
    ManifestError,
)
from haute.core.logging import get_logger
from haute.binding.loader import FileSystemLoader, ModuleLoader
from haute.binding.models import NOT_FOUND, Bone, Call, Lazy, as_argument, as_element

logger = get_logger(__name__)


def _bind_filename(
    use_filename: Callable[[Any, str, str], Any], filename: str, relative_path: str
) -> Callable[[Any], Any]:
    def apply(value: Any) -> Any:
        return use_filename(value, filename, relative_path)

    return apply


class CallResolver:
    """
    Resolves manifests into call plans.

    Stateless between runs: every ``resolve()`` call loads and walks fresh.

    Example:
        resolver = CallResolver(dirname="app/closet")
        calls = resolver.resolve("server", [
            {"place": "plugins", "method": "register", "list": True},
            {"place": "routes", "method": "route", "list": True},
        ])
    """

    def __init__(
        self,
        loader: ModuleLoader | None = None,
        dirname: str | Path | None = None,
    ):
        """
        Initialize resolver.

        Args:
            loader: Module loading capability (defaults to FileSystemLoader)
            dirname: Base directory for bones that don't carry their own
        """
        self.loader = loader or FileSystemLoader()
        self.dirname = dirname

    def resolve(
        self,
        instance_name: str,
        manifest: Iterable[Bone | Mapping[str, Any]],
    ) -> list[Call]:
        """
        Resolve a manifest into an ordered list of calls.

        Args:
            instance_name: Label of the host instance, used in error messages
            manifest: Bones (or bone mappings) in call order

        Returns:
            Calls in manifest order, list bones expanded in list/walk order

        Raises:
            InvalidInstanceNameError: If instance_name is not a non-empty string
            DirectoryNotFoundError: If a referenced base directory is missing
            ManifestError: If a bone is malformed or has no base directory
        """
        bones = self.validate(instance_name, manifest)

        calls: list[Call] = []
        for bone in bones:
            resolved = self._resolve_bone(instance_name, bone)
            if not resolved:
                logger.debug(
                    "resolver.bone_skipped",
                    instance=instance_name,
                    place=bone.place,
                    method=bone.method_name,
                )
            calls.extend(resolved)

        logger.info(
            "resolver.resolved",
            instance=instance_name,
            bones=len(bones),
            calls=len(calls),
        )
        return calls

    def validate(
        self,
        instance_name: str,
        manifest: Iterable[Bone | Mapping[str, Any]],
    ) -> list[Bone]:
        """
        Check the instance label, every bone and every base directory.

        Loads nothing. Returns the manifest coerced to bones.

        Raises:
            InvalidInstanceNameError: If instance_name is not a non-empty string
            DirectoryNotFoundError: If a referenced base directory is missing
            ManifestError: If a bone is malformed or has no base directory
        """
        if not isinstance(instance_name, str) or not instance_name:
            raise InvalidInstanceNameError(instance_name)

        bones = [Bone.coerce(bone) for bone in manifest]
        self._validate_dirnames(bones)
        return bones

    def _base_dir(self, bone: Bone) -> Path:
        dirname = bone.dirname if bone.dirname is not None else self.dirname
        if dirname is None:
            raise ManifestError(
                f"Bone for place '{bone.place}' has no dirname and no default was given",
                field="dirname",
            )
        return Path(dirname)

    def _validate_dirnames(self, bones: list[Bone]) -> None:
        """Every distinct base directory must exist."""
        seen: set[Path] = set()
        for bone in bones:
            dirname = self._base_dir(bone)
            if dirname in seen:
                continue
            seen.add(dirname)
            if not self.loader.is_dir(dirname):
                raise DirectoryNotFoundError(str(dirname))

    def _resolve_bone(self, instance_name: str, bone: Bone) -> list[Call]:
        place = self._base_dir(bone) / bone.place

        loaded = self.loader.try_load(place)

        if loaded is NOT_FOUND:
            if bone.list and self.loader.is_dir(place):
                return self._resolve_directory(instance_name, bone, place)
            return []

        value = loaded.value
        if value is None:
            return []

        def make(args: Any, **flags: Any) -> Call:
            return Call(
                instance_name=instance_name,
                method=bone.method,
                signature=bone.signature,
                args=args,
                file=str(loaded.path),
                place=bone.place,
                list=bone.list,
                meta=bone.meta,
                **flags,
            )

        if bone.list and isinstance(value, (list, tuple)):
            # Elements of a materialised list are literal unless explicitly Lazy
            return [
                make(as_element(element), element=True, evaluated=not isinstance(element, Lazy))
                for element in value
            ]

        return [make(as_argument(value))]

    def _resolve_directory(self, instance_name: str, bone: Bone, place: Path) -> list[Call]:
        items = self.loader.walk(
            place,
            recursive=bone.recursive,
            include=bone.include,
            exclude=bone.exclude,
        )

        calls = []
        for item in items:
            use_filename = None
            if bone.use_filename is not None:
                use_filename = _bind_filename(bone.use_filename, item.basename, item.relative_path)

            calls.append(
                Call(
                    instance_name=instance_name,
                    method=bone.method,
                    signature=bone.signature,
                    args=as_argument(item.value),
                    file=str(item.path),
                    place=str(Path(bone.place) / item.relative_path),
                    use_filename=use_filename,
                    list=True,
                    dir_file=True,
                    meta=bone.meta,
                )
            )
        return calls


def resolve(
    instance_name: str,
    manifest: Iterable[Bone | Mapping[str, Any]],
    *,
    dirname: str | Path | None = None,
    loader: ModuleLoader | None = None,
) -> list[Call]:
    """Shortcut for ``CallResolver(loader, dirname).resolve(instance_name, manifest)``."""
    return CallResolver(loader=loader, dirname=dirname).resolve(instance_name, manifest)


__all__ = ["CallResolver", "resolve"]
