"""
Modules: the nodes of the namespace tree in which bindings are declared.

Every module belongs to exactly one tree and is addressable by its dotted
full name through an index shared by all modules of that tree. The index
also owns the tree's interceptors, in registration order.
"""

import inspect
import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from zone.binding import Binding
from zone.constants import freeze
from zone.descriptors import (
    FREE,
    OPTIONAL,
    Descriptor,
    FunctionDescriptor,
    ValueDescriptor,
    inferred_name,
    make_constructor_descriptor,
    make_function_descriptor,
    make_value_descriptor,
    parse_binding_name,
)
from zone.domain import Access
from zone.errors import (
    DeclarationError,
    ModuleConfigurationError,
    NotFoundError,
    SealedModuleError,
    UnknownModuleError,
)
from zone.injection import InjectedFunction, inject_function
from zone.interceptors import Interceptor, Selector, name_selector
from zone.paths import Path, make_full_name
from zone.resolution import find_resolvable

__all__ = ["Module", "ModuleIndex", "copy_tree"]

logger = logging.getLogger(__name__)


class ModuleIndex:
    """Bookkeeping shared by all modules of one tree.

    Attributes:
        modules: Every module of the tree by full name; the root is "".
        interceptors: Every interceptor registered in the tree, in order.
    """

    def __init__(self):
        self.modules: dict[str, "Module"] = {}
        self.interceptors: list[Interceptor] = []


def _ensure_valid_name(name: Any) -> None:
    if not isinstance(name, str) or name == "" or "." in name:
        raise DeclarationError(f"Invalid name {name!r}")


def _ensure_imports(imports: Any) -> tuple[str, ...]:
    if isinstance(imports, str) or not isinstance(imports, (list, tuple)):
        raise DeclarationError(f"Imports are not a list: {imports!r}")
    return tuple(imports)


class Module:
    """A namespace holding bindings, child modules and imports.

    Bindings are registered with ``value``, ``constant``, ``factory`` and
    ``service``; their names may start with ``-`` (private), ``#``
    (protected) or ``+`` (public, the default). Once any lookup has searched
    a module it is sealed and accepts no further bindings or imports.
    """

    def __init__(
        self,
        name: str,
        parent: Optional["Module"] = None,
        imports: Optional[Sequence[str]] = None,
        index: Optional[ModuleIndex] = None,
    ):
        self.name = name
        self.parent = parent
        self._children: dict[str, Module] = {}
        self._bindings: dict[str, Binding] = {}
        self._imports: Optional[tuple[str, ...]] = (
            None if imports is None else _ensure_imports(imports)
        )
        self._sealed = False

        if parent is not None:
            if name in parent._children:
                raise DeclarationError(
                    f"Module {parent.full_name!r} already contains a module {name!r}"
                )
            self.full_name = make_full_name(parent.full_name, name)
            self._index = parent._index
            parent._children[name] = self
        else:
            self.full_name = name
            self._index = index if index is not None else ModuleIndex()
        self._index.modules[self.full_name] = self

    @classmethod
    def new_root(cls) -> "Module":
        return cls("", None, ())

    def __repr__(self) -> str:
        return f"Module({self.full_name!r})"

    @property
    def root(self) -> "Module":
        return self._index.modules[""]

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def imports(self) -> Optional[tuple[str, ...]]:
        return self._imports

    @property
    def children(self) -> Mapping[str, "Module"]:
        return MappingProxyType(self._children)

    @property
    def bindings(self) -> Mapping[str, Binding]:
        return MappingProxyType(self._bindings)

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return tuple(self._index.interceptors)

    @property
    def all_modules(self) -> Mapping[str, "Module"]:
        return MappingProxyType(self._index.modules)

    # -- tree ---------------------------------------------------------------

    def find_module(self, full_name: str) -> Optional["Module"]:
        """Look up a module of this tree by full name, without creating it."""
        return self._index.modules.get(full_name)

    def module(self, full_name: str) -> "Module":
        """Look up a module of this tree by full name, creating it if needed."""
        found = self.find_module(full_name)
        if found is not None:
            return found
        found = self.root
        for name in full_name.split("."):
            found = found.create(name)
        return found

    def get_module(
        self, path: Optional[str] = None, prevent_implicit_create: bool = False
    ) -> "Module":
        """Look up a module by full name; the root if ``path`` is empty.

        Raises:
            UnknownModuleError: If the module does not exist and implicit
                creation is prevented.
        """
        if not path:
            return self.root
        if prevent_implicit_create:
            found = self.find_module(path)
            if found is None:
                raise UnknownModuleError(f"Module not found {path!r}")
            return found
        return self.module(path)

    def create(self, name: str, imports: Optional[Sequence[str]] = None) -> "Module":
        """Return the child module ``name``, creating it if it does not exist.

        Args:
            name: The local name of the child.
            imports: Full names of the modules the child imports. Imports can
                be set only once per module.

        Raises:
            DeclarationError: If ``name`` is not a valid local name.
            ModuleConfigurationError: If ``imports`` is given for a child
                whose imports are already set.
        """
        _ensure_valid_name(name)
        child = self._children.get(name)
        if child is None:
            return Module(name, self, imports)
        if imports is not None:
            child.configure(imports)
        return child

    def configure(self, imports: Sequence[str]) -> "Module":
        """Set the modules this module imports public bindings from."""
        imports = _ensure_imports(imports)
        if self._imports is not None:
            raise ModuleConfigurationError(
                f"Module has already been configured {self.full_name!r}"
            )
        self._ensure_unsealed()
        self._imports = imports
        return self

    def seal(self) -> None:
        self._sealed = True

    def pin_imports(self) -> tuple[str, ...]:
        """Return this module's imports, fixing them as empty if never set."""
        if self._imports is None:
            self._imports = ()
        return self._imports

    def binding(self, name: str) -> Optional[Binding]:
        return self._bindings.get(name)

    # -- registration -------------------------------------------------------

    def value(self, name: str, value: Any) -> "Module":
        """Bind a value as is."""
        return self._define(name, make_value_descriptor(value))

    def constant(self, name: str, value: Any) -> "Module":
        """Bind a deeply frozen copy of a value.

        Containers are replaced by read-only equivalents (see
        ``zone.constants.freeze``), so mutating the resolved value fails.
        Other objects are bound as they are: their attributes stay writable.
        """
        if isinstance(value, ValueDescriptor):
            value = value.value
        return self._define(name, make_value_descriptor(freeze(value)))

    def factory(self, name: str, *args: Any) -> "Module":
        """Bind the result of calling a producer with its injected dependencies."""
        return self._define(name, make_function_descriptor(self._producer_args(args)))

    def service(self, name: str, *args: Any) -> "Module":
        """Bind a new instance built by a constructor with its injected dependencies."""
        return self._define(name, make_constructor_descriptor(self._producer_args(args)))

    def provides(
        self, name: Optional[str] = None, dependencies: Optional[Sequence[str]] = None
    ) -> Callable:
        """Decorator to register a function as a factory or a class as a service.

        Args:
            name: Binding name, optionally with an access sigil; defaults to
                the function name with any 'make_' prefix removed, or the
                class name.
            dependencies: Explicit dependency names; by default they are
                read from the target's signature.

        Example:
            @module.provides("#repository")
            def make_repository(database):
                return Repository(database)
        """

        def decorator(target: Any) -> Any:
            binding_name = name or inferred_name(target)
            args = (target,) if dependencies is None else (list(dependencies), target)
            if inspect.isclass(target):
                self.service(binding_name, *args)
            elif callable(target):
                self.factory(binding_name, *args)
            else:
                raise DeclarationError(f"{target!r} is not a class or function")
            return target

        return decorator

    def interceptor(self, selector: Union[str, Selector], *args: Any) -> "Module":
        """Register an interceptor for one binding, or for every selected binding.

        Args:
            selector: The local or dotted name of the binding to intercept, or
                a predicate over (module full name, local name) applied to
                every binding in the tree.
            *args: A descriptor of a producer returning the transform. The
                producer's dependencies are resolved in this module; the
                transform takes the value (and optionally the module full
                name and local name) and returns the replacement value.
        """
        target = None
        if isinstance(selector, str):
            path = Path.parse(selector, self)
            module = path.module or self.module(path.module_path)
            target = (module.full_name, path.local)
            selector = name_selector(*target)
        elif not callable(selector):
            raise DeclarationError(f"Invalid interceptor {selector!r}")

        descriptor = make_function_descriptor(self._producer_args(args))
        descriptor.validate_dependency_names(OPTIONAL, FREE)
        self._index.interceptors.append(
            Interceptor(self.full_name, selector, descriptor, target)
        )
        return self

    def _producer_args(self, args: Sequence[Any]) -> Sequence[Any]:
        if not args:
            raise DeclarationError("Expected a producer or a function descriptor")
        return args

    def _define(self, name: str, descriptor: Descriptor) -> "Module":
        if not isinstance(name, str):
            raise DeclarationError(f"Invalid name to bind {name!r}")
        local, access, _ = parse_binding_name(name)
        _ensure_valid_name(local)
        if local in self._bindings:
            raise DeclarationError(f"Name {local!r} already bound in {self.full_name!r}")
        self._ensure_unsealed()
        if isinstance(descriptor, FunctionDescriptor):
            descriptor.validate_dependency_names(OPTIONAL, FREE)

        self._bindings[local] = Binding(self, local, access, descriptor)
        logger.debug("Bound %s (%s)", make_full_name(self.full_name, local), access.name)
        return self

    def _ensure_unsealed(self) -> None:
        if self._sealed:
            raise SealedModuleError(f"Module {self.full_name!r} is sealed")

    # -- resolution ---------------------------------------------------------

    def get(self, name: str) -> Any:
        """Resolve a public binding by local or dotted name.

        Raises:
            NotFoundError: If no public binding is visible under ``name``.
        """
        binding = find_resolvable(name, self, Access.PUBLIC)
        if binding is None:
            raise NotFoundError(f"Not found {name!r} from module {self.full_name!r}")
        return binding.resolve()

    def inject(self, *args: Any) -> InjectedFunction:
        """Wire a function with public values visible from this module.

        Dependencies are resolved immediately. Names starting with ``#`` are
        free parameters supplied, in order, when the result is called.
        """
        descriptor = make_function_descriptor(self._producer_args(args))
        descriptor.validate_dependency_names(FREE + OPTIONAL, "")
        return inject_function(self, Access.PUBLIC, descriptor, True, defer_context=True)


def copy_tree(root: Module) -> Module:
    """Copy a tree's modules, imports, descriptors and interceptors.

    Resolved values are not copied, so every binding of the copy is produced
    afresh on first use.
    """
    copy = Module.new_root()
    copy._index.interceptors.extend(root._index.interceptors)
    _copy_contents(root, copy)
    return copy


def _copy_contents(source: Module, target: Module) -> None:
    target._imports = source._imports
    for name, binding in source._bindings.items():
        target._bindings[name] = binding.copy(target)
    for name, child in source._children.items():
        _copy_contents(child, Module(name, target))
