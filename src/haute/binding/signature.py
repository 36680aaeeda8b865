"""
Signature binding, method lookup, and attribution helpers.

Used by the executor:

- :func:`apply_signature` destructures a resolved argument into positional
  arguments.
- :func:`reach` / :func:`resolve_method` locate a target by dotted path.
- :func:`attribution` builds the tag prefixed to invocation errors.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from haute.core.errors import MethodNotFoundError
from haute.binding.models import Call

_OPTIONAL = re.compile(r"^\[(.+)\]$")


def _owns(value: Any, name: str) -> bool:
    if isinstance(value, Mapping):
        return name in value
    return hasattr(value, name)


def _field(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def apply_signature(signature: Sequence[str] | None, value: Any) -> list[Any]:
    """
    Build the positional argument list for a call.

    Without a signature the whole value is the sole argument. With one,
    fields are picked in signature order; ``"[name]"`` fields are only
    included when the value owns them, required fields that are missing
    bind as None.

    >>> apply_signature(["[a]", "b"], {"b": "x"})
    ['x']
    >>> apply_signature(["[a]", "b"], {"a": "y", "b": "x"})
    ['y', 'x']
    >>> apply_signature(None, {"b": "x"})
    [{'b': 'x'}]
    """
    if signature is None:
        return [value]

    collected = []
    for name in signature:
        optional = _OPTIONAL.match(name)
        if optional:
            name = optional.group(1)
            if _owns(value, name):
                collected.append(_field(value, name))
        else:
            collected.append(_field(value, name))
    return collected


def reach(obj: Any, path: str) -> Any:
    """
    Follow a dotted path through attributes and mapping keys.

    Returns None as soon as a segment is missing.
    """
    for segment in path.split("."):
        if obj is None:
            return None
        if isinstance(obj, Mapping):
            obj = obj.get(segment)
        else:
            obj = getattr(obj, segment, None)
    return obj


def resolve_method(instance: Any, path: str, instance_name: str) -> Callable[..., Any]:
    """
    Resolve ``path`` on ``instance`` to a callable.

    Attribute access yields bound methods, so ``deep.call_this`` runs with
    ``instance.deep`` as its receiver.

    Raises:
        MethodNotFoundError: If the path does not end at a callable
    """
    method = reach(instance, path)
    if not callable(method):
        raise MethodNotFoundError(instance_name, path)
    return method


def attribution(call: Call) -> str:
    """
    Attribution tag for errors raised by ``call``'s target.

    Distinguishes dotted instance methods from directly-supplied callables
    and names the file that produced the arguments.
    """
    if isinstance(call.method, str):
        return f"{call.instance_name}.{call.method}() called by haute using {call.file}"
    return f"{call.method_name}() for {call.instance_name} called by haute using {call.file}"


__all__ = ["apply_signature", "reach", "resolve_method", "attribution"]
