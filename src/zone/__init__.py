"""Zone hierarchical dependency injection container.

Zone organises bindings (values, factories and services) into a tree of
dotted-name modules. A binding's dependencies are the parameter names of its
producer; they are looked up from the module that declares the binding, and
each value is produced once, on first use, then memoised.

Key Features:
    - Nested modules addressable by dotted path, with private (``-``),
      protected (``#``) and public (``+``) bindings
    - Non-transitive imports between modules, with cycle detection
    - Optional (``?``) and caller-supplied (``#``) dependencies
    - Interceptors transforming values on first resolution
    - Structural copies of a whole container for isolated tests

Basic Usage:
    >>> from zone import Zone
    >>>
    >>> zone = Zone()
    >>> zone.value("db.url", "sqlite://")
    >>>
    >>> @zone.provides("db.connection")
    >>> def make_connection(url):
    ...     return connect(url)
    >>>
    >>> zone.get("db.connection")

The framework consists of several core modules:
    - container: The ``Zone`` facade
    - module: Module tree, registration and structural copies
    - descriptors: Value and function descriptors, dependency names
    - resolution: Name lookup across modules, imports and ancestors
    - injection: Wiring producers with their dependencies
    - binding: Memoised resolution of a single binding
    - interceptors: Transforms applied on first resolution
    - host: Bindings exposing host facilities
    - errors: Framework-specific exceptions
"""

from zone.container import VERSION, DeferredInjection, Zone
from zone.descriptors import FunctionDescriptor, ValueDescriptor
from zone.domain import Access
from zone.errors import (
    CyclicDependencyError,
    DeclarationError,
    DependencyError,
    InterceptorError,
    ModuleConfigurationError,
    NotFoundError,
    ProducerError,
    ResolutionError,
    SealedModuleError,
    UnknownModuleError,
)
from zone.host import install_host_bindings
from zone.injection import InjectedFunction
from zone.module import Module

__all__ = [
    "Access",
    "CyclicDependencyError",
    "DeclarationError",
    "DeferredInjection",
    "DependencyError",
    "FunctionDescriptor",
    "InjectedFunction",
    "InterceptorError",
    "Module",
    "ModuleConfigurationError",
    "NotFoundError",
    "ProducerError",
    "ResolutionError",
    "SealedModuleError",
    "UnknownModuleError",
    "VERSION",
    "ValueDescriptor",
    "Zone",
    "install_host_bindings",
    "zone",
]

__version__ = VERSION

zone = Zone()
install_host_bindings(zone)
