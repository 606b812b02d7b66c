"""In-place purge of nested settings mappings."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, TypeVar

M = TypeVar("M", bound=MutableMapping[Any, Any])


def deep_purge(obj: M) -> M:
    """Recursively clear a mapping without replacing any mapping it contains.

    Every key whose value is a nested mapping is kept and the nested mapping
    is purged by the same rule, so its identity survives. Every other key
    (scalars, ``None``, lists, tuples, callables, arbitrary objects) is
    deleted. Lists are never recursed into.

    Args:
        obj: Mapping to purge in place

    Returns:
        The same mapping, for chaining
    """
    for key in list(obj.keys()):
        value = obj[key]
        if isinstance(value, MutableMapping):
            deep_purge(value)
        else:
            del obj[key]
    return obj
