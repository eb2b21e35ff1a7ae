"""Wiring producer functions with the values of their dependencies."""

import inspect
import logging
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, Optional, Sequence

from zone.descriptors import FREE, OPTIONAL, FunctionDescriptor
from zone.domain import Access
from zone.errors import DeclarationError, DependencyError, NotFoundError
from zone.resolution import find_resolvable

if TYPE_CHECKING:
    from zone.module import Module

__all__ = ["InjectedFunction", "inject_function"]

logger = logging.getLogger(__name__)


class InjectedFunction:
    """A producer whose dependencies have been resolved.

    Calling it supplies the resolved values, plus any positional call-time
    arguments for the free (``#``) parameters in declaration order, and
    invokes the producer. Missing free arguments are passed as None and extra
    ones are ignored.

    If the producer takes a receiver, it is given the context the function
    was built with. An injected function whose context is deferred takes the
    instance it is accessed through as its receiver when stored as a class
    attribute, and falls back to its module when called directly.
    """

    def __init__(
        self,
        descriptor: FunctionDescriptor,
        arguments: Sequence[Any],
        free_slots: Sequence[int],
        context: Any,
        defer_context: bool = False,
    ):
        self.descriptor = descriptor
        self._arguments = list(arguments)
        self._free_slots = list(free_slots)
        self._context = context
        self._defer_context = defer_context

    def __call__(self, *free_arguments: Any) -> Any:
        return self._invoke(self._context, free_arguments)

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None or not self._defer_context:
            return self

        def bound(*free_arguments: Any) -> Any:
            return self._invoke(instance, free_arguments)

        return bound

    def __repr__(self) -> str:
        return f"InjectedFunction({self.descriptor.func!r}, names={list(self.descriptor.names)})"

    def _invoke(self, context: Any, free_arguments: Sequence[Any]) -> Any:
        arguments = list(self._arguments)
        for slot, value in zip(self._free_slots, free_arguments):
            arguments[slot] = value

        func = self.descriptor.func
        if self.descriptor.is_constructor and not inspect.isclass(func):
            return _construct(self.descriptor, arguments)
        if self.descriptor.receives_context:
            return func(context, *arguments)
        return func(*arguments)


def _construct(descriptor: FunctionDescriptor, arguments: list[Any]) -> Any:
    # a plain function used as a constructor initialises a fresh object
    if not descriptor.receives_context:
        return descriptor.func(*arguments)
    instance = SimpleNamespace()
    result = descriptor.func(instance, *arguments)
    return instance if result is None else result


def inject_function(
    module: "Module",
    access: Access,
    descriptor: FunctionDescriptor,
    allow_free_arguments: bool,
    defer_context: bool = False,
) -> InjectedFunction:
    """Resolve every dependency of ``descriptor`` as seen from ``module``.

    Args:
        module: The module in which dependency names are looked up; also the
            context passed to a producer's receiver.
        access: The highest access level used for the lookups.
        descriptor: The producer and its dependency names.
        allow_free_arguments: Whether ``#`` parameters are permitted.
        defer_context: If True, the receiver is taken from the instance the
            injected function is accessed through, when there is one.

    Returns:
        An ``InjectedFunction`` ready to be called.

    Raises:
        DeclarationError: If a free parameter is declared where not allowed.
        NotFoundError: If a required dependency cannot be found.
        DependencyError: If resolving a dependency fails.
    """
    arguments: list[Any] = []
    free_slots: list[int] = []

    for name in descriptor.names:
        if name.startswith(FREE):
            if not allow_free_arguments:
                raise DeclarationError(f"Free arguments are not allowed: {name}")
            free_slots.append(len(arguments))
            arguments.append(None)
            continue

        optional = name.startswith(OPTIONAL)
        if optional:
            name = name[1:]

        binding = find_resolvable(name, module, access)
        if binding is not None:
            try:
                arguments.append(binding.resolve())
            except DependencyError:
                logger.debug("Injection failed: %s", name)
                raise
        elif optional:
            arguments.append(None)
        else:
            raise NotFoundError(
                f"Injectable not found: {name!r} from module {module.full_name!r}"
            )

    return InjectedFunction(descriptor, arguments, free_slots, module, defer_context)
