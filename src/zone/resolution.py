"""
Search for the binding that a name refers to, as seen from a given module.

A search looks first in the module itself, then in each of its imports (in
declaration order, public bindings only, without following the imports of
imports), and then moves to the parent module with protected access, until
the root has been searched. Every module that is searched is sealed, so that
its bindings can no longer change shape once something may depend on them.
"""

import logging
from typing import TYPE_CHECKING, Optional

from zone.domain import Access
from zone.errors import CyclicDependencyError, UnknownModuleError
from zone.paths import Path, access_between

if TYPE_CHECKING:
    from zone.binding import Binding
    from zone.module import Module

__all__ = ["find_resolvable"]

logger = logging.getLogger(__name__)


def find_resolvable(
    name: str,
    start: "Module",
    access: Access,
    recurse: bool = True,
    recursion_guard: Optional[set[str]] = None,
) -> Optional["Binding"]:
    """Find the binding for a local or dotted name.

    Args:
        name: A local name, or a dotted name whose module part is a full
            module name.
        start: The module on whose behalf the search is performed.
        access: The highest access level the caller is entitled to.
        recurse: If False, only the target module's own bindings are checked;
            this is how imported modules are searched.
        recursion_guard: Full names of modules whose imports are currently
            being searched.

    Returns:
        The binding, or None if no accessible binding exists. A dotted name
        whose module does not exist yields None without creating the module.

    Raises:
        CyclicDependencyError: If an import leads back to a module whose
            imports are already being searched.
        UnknownModuleError: If a searched module imports a module that does
            not exist.
    """
    path = Path.parse(name, start)
    current = path.module
    local = path.local

    if current is not None and current is not start:
        access = min(access, access_between(start, current))

    if recursion_guard is None:
        recursion_guard = set()

    while current is not None:
        current.seal()

        binding = current.binding(local)
        if binding is not None and binding.is_accessible(access):
            return binding

        if not recurse:
            return None

        binding = _find_in_imports(local, current, recursion_guard)
        if binding is not None:
            return binding

        access = Access.PROTECTED
        current = current.parent

    return None


def _find_in_imports(
    local: str, module: "Module", recursion_guard: set[str]
) -> Optional["Binding"]:
    if module.full_name in recursion_guard:
        raise CyclicDependencyError(f"Cyclic dependency : {module.full_name!r}")

    recursion_guard.add(module.full_name)
    try:
        for import_name in module.pin_imports():
            imported = module.find_module(import_name)
            if imported is None:
                raise UnknownModuleError(
                    f"Invalid dependency : {import_name!r} imported by {module.full_name!r}"
                )
            if imported.full_name in recursion_guard:
                raise CyclicDependencyError(
                    f"Cyclic dependency : {module.full_name!r} imports {imported.full_name!r}"
                )
            binding = find_resolvable(
                local, imported, Access.PUBLIC, False, recursion_guard
            )
            if binding is not None:
                logger.debug(
                    "Found %s through import of %s", binding.full_name, import_name
                )
                return binding
        return None
    finally:
        recursion_guard.discard(module.full_name)
