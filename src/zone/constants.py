"""Deep freezing of values registered as constants."""

from collections.abc import Mapping, Set
from types import MappingProxyType
from typing import Any

__all__ = ["freeze"]


def freeze(value: Any) -> Any:
    """Return a read-only equivalent of ``value``.

    Mappings become ``MappingProxyType`` views over a private copy, lists and
    tuples become tuples (named tuples keep their type), sets become
    frozensets and bytearrays become bytes, all recursively. Any other object
    is returned as is.

    Example:
        >>> config = freeze({"hosts": ["a", "b"]})
        >>> config["hosts"]            # ('a', 'b')
        >>> config["port"] = 80        # TypeError
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, tuple) and hasattr(value, "_fields"):
        return value._make(freeze(item) for item in value)
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    if isinstance(value, Set):
        return frozenset(freeze(item) for item in value)
    if isinstance(value, bytearray):
        return bytes(value)
    return value
