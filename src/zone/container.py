"""
The container facade: a callable ``Zone`` giving access to one module tree.

``zone()`` returns the root module and ``zone("a.b")`` the module at a dotted
path, creating it unless told otherwise. The remaining methods mirror the
module API but take full dotted names resolved from the root.
"""

import re
from typing import Any, Callable, Optional, Union

from zone.descriptors import (
    FunctionDescriptor,
    ValueDescriptor,
    make_constructor_descriptor,
    make_function_descriptor,
    make_value_descriptor,
    parse_binding_name,
)
from zone.domain import Access
from zone.errors import DeclarationError, NotFoundError
from zone.injection import InjectedFunction
from zone.interceptors import Selector
from zone.module import Module, copy_tree
from zone.paths import Path

__all__ = ["Zone", "DeferredInjection", "VERSION"]

VERSION = "1.0"

NameFilter = Union[Callable[[str], bool], re.Pattern, str, None]


def _name_predicate(name_filter: NameFilter) -> Callable[[str], bool]:
    if name_filter is None:
        return lambda _: True
    if isinstance(name_filter, (str, re.Pattern)):
        pattern = re.compile(name_filter)
        return lambda full_name: pattern.search(full_name) is not None
    if callable(name_filter):
        return name_filter
    raise DeclarationError(f"Invalid name filter {name_filter!r}")


def _check_arguments(args: tuple, low: int, high: int) -> None:
    if len(args) < low:
        raise DeclarationError(f"Expected at least {low} arguments, but got {len(args)}")
    if len(args) > high:
        raise DeclarationError(f"Expected at most {high} arguments, but got {len(args)}")


class DeferredInjection:
    """An injected function whose dependencies are looked up on first call.

    The module is looked up without implicit creation; the injected function
    is then cached for later calls.
    """

    def __init__(self, zone: "Zone", module_name: str, descriptor: FunctionDescriptor):
        self._zone = zone
        self._module_name = module_name
        self._descriptor = descriptor
        self._function: Optional[InjectedFunction] = None

    def __call__(self, *args: Any) -> Any:
        return self._resolve()(*args)

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return self._resolve().__get__(instance, owner)

    def _resolve(self) -> InjectedFunction:
        if self._function is None:
            module = self._zone(self._module_name, True)
            self._function = module.inject(self._descriptor)
        return self._function


class Zone:
    """A dependency injection container over one tree of modules.

    Example:
        >>> zone = Zone()
        >>> zone.value("config.port", 8080)
        >>> zone.factory("web.server", ["config.port"], lambda port: Server(port))
        >>> zone.get("web.server")
    """

    def __init__(self, root: Optional[Module] = None):
        self._root = root if root is not None else Module.new_root()

    def __call__(
        self, path: Optional[str] = None, prevent_implicit_create: bool = False
    ) -> Module:
        """Return the module at ``path``, or the root if no path is given.

        Raises:
            UnknownModuleError: If the module does not exist and
                ``prevent_implicit_create`` is set.
        """
        return self._root.get_module(path, prevent_implicit_create)

    def __repr__(self) -> str:
        return f"Zone(modules={len(self._root.all_modules)})"

    @property
    def root(self) -> Module:
        return self._root

    # -- descriptors --------------------------------------------------------

    @staticmethod
    def as_function(*args: Any) -> FunctionDescriptor:
        _check_arguments(args, 1, 2)
        return make_function_descriptor(args)

    @staticmethod
    def as_constructor(*args: Any) -> FunctionDescriptor:
        _check_arguments(args, 1, 2)
        return make_constructor_descriptor(args)

    @staticmethod
    def as_value(value: Any) -> ValueDescriptor:
        return make_value_descriptor(value)

    # -- resolution ---------------------------------------------------------

    def inject(self, *args: Any) -> DeferredInjection:
        """Build a function injected from a module, root by default.

        If the first argument is a string it names the module; the rest
        describe the function. Lookups happen when the function is first
        called, which makes this usable to declare test bodies up front.
        """
        _check_arguments(args, 1, 3)
        module_name = ""
        if isinstance(args[0], str):
            module_name, args = args[0], args[1:]
        return DeferredInjection(self, module_name, make_function_descriptor(args))

    def get(self, name: str) -> Any:
        """Resolve a public binding by its full dotted name."""
        path = Path.parse(name, self._root)
        if path.module is None:
            raise NotFoundError(f"Not found {name!r}")
        return path.module.get(path.local)

    # -- registration -------------------------------------------------------

    def value(self, name: str, value: Any) -> "Zone":
        module, local = self._target(name)
        module.value(local, value)
        return self

    def constant(self, name: str, value: Any) -> "Zone":
        module, local = self._target(name)
        module.constant(local, value)
        return self

    def factory(self, name: str, *args: Any) -> "Zone":
        module, local = self._target(name)
        module.factory(local, *args)
        return self

    def service(self, name: str, *args: Any) -> "Zone":
        module, local = self._target(name)
        module.service(local, *args)
        return self

    def provides(self, name: str, dependencies: Optional[list[str]] = None) -> Callable:
        """Decorator registering a function or class under a full dotted name."""
        module, local = self._target(name)
        return module.provides(local, dependencies)

    def interceptor(self, selector: Union[str, Selector], *args: Any) -> "Zone":
        """Register an interceptor resolved in the root module."""
        self._root.interceptor(selector, *args)
        return self

    def _target(self, name: str) -> tuple[Module, str]:
        local, _, prefix = parse_binding_name(name)
        path = Path.parse(local, self._root)
        module = path.module or self(path.module_path)
        return module, prefix + path.local

    # -- whole tree ---------------------------------------------------------

    def make_zone(self) -> "Zone":
        """A new, empty container."""
        return Zone()

    def copy_zone(self) -> "Zone":
        """A container with the same modules, bindings and interceptors, nothing resolved."""
        return Zone(copy_tree(self._root))

    def reset(self) -> "Zone":
        """Discard every module and binding of this container.

        Host bindings go too, including those of the package-level ``zone``;
        call ``install_host_bindings`` again to restore them.
        """
        self._root = Module.new_root()
        return self

    def names(self, name_filter: NameFilter = None) -> list[str]:
        """Full names of every public binding, sorted.

        Args:
            name_filter: A predicate over full names, or a regular expression
                (compiled or as a string) searched for in each full name.
        """
        accept = _name_predicate(name_filter)
        return sorted(
            binding.full_name
            for module in self._root.all_modules.values()
            for binding in module.bindings.values()
            if binding.access is Access.PUBLIC and accept(binding.full_name)
        )

    @staticmethod
    def version() -> str:
        return VERSION
