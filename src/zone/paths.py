"""Dotted path handling and the access relation between modules."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from zone.domain import Access

if TYPE_CHECKING:
    from zone.module import Module

__all__ = ["Path", "make_full_name", "access_between"]


def make_full_name(prefix: str, suffix: str) -> str:
    if prefix == "":
        return suffix
    return f"{prefix}.{suffix}"


@dataclass(frozen=True)
class Path:
    """A name split at its last dot into a module part and a local part.

    Attributes:
        module: The module the name refers to; the default module for a local
            name, None if a dotted name names a module that does not exist.
        module_path: The module part of a dotted name, "" for a local name.
        local: The last component of the name.
    """

    module: Optional["Module"]
    module_path: str
    local: str

    @classmethod
    def parse(cls, name: str, default: "Module") -> "Path":
        """Parse ``name`` relative to ``default``; never creates modules."""
        index = name.rfind(".")
        if index < 0:
            return cls(default, "", name)
        module_path = name[:index]
        return cls(default.find_module(module_path), module_path, name[index + 1:])


def access_between(source: "Module", target: "Module") -> Access:
    """The access that code in ``source`` has to bindings of ``target``.

    Private within the same module, protected if ``target`` is an ancestor of
    ``source``, public otherwise.
    """
    if source is target:
        return Access.PRIVATE
    ancestor = source.parent
    while ancestor is not None:
        if ancestor is target:
            return Access.PROTECTED
        ancestor = ancestor.parent
    return Access.PUBLIC
