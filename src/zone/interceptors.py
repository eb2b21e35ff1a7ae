"""Interceptors: transforms applied to a binding's value when first resolved."""

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from zone.descriptors import FunctionDescriptor
from zone.domain import Access
from zone.errors import DependencyError, InterceptorError
from zone.injection import inject_function

if TYPE_CHECKING:
    from zone.binding import Binding

__all__ = ["Interceptor", "Selector", "name_selector", "intercept"]

logger = logging.getLogger(__name__)

Selector = Callable[[str, str], bool]


@dataclass(frozen=True)
class Interceptor:
    """A registered interceptor.

    Attributes:
        module_name: Full name of the module in which the interceptor's own
            dependencies are resolved.
        selector: Predicate over (module full name, local binding name).
        descriptor: Producer of the transform function.
        target: The (module full name, local name) pair for interceptors
            registered by name, None for predicate interceptors.
    """

    module_name: str
    selector: Selector
    descriptor: FunctionDescriptor
    target: Optional[tuple[str, str]] = None

    def applies_to(self, module_name: str, local_name: str) -> bool:
        return bool(self.selector(module_name, local_name))


def name_selector(module_name: str, local_name: str) -> Selector:
    def selector(m: str, l: str) -> bool:
        return m == module_name and l == local_name

    return selector


def intercept(binding: "Binding", value: Any) -> Any:
    """Run every applicable interceptor over a freshly produced value.

    Interceptors run in registration order, each on the output of the one
    before it.
    """
    module = binding.module
    for interceptor in module.interceptors:
        if not interceptor.applies_to(module.full_name, binding.name):
            continue

        defining_module = module.module(interceptor.module_name)
        injected = inject_function(
            defining_module, Access.PRIVATE, interceptor.descriptor, False
        )
        try:
            value = _apply(injected(), value, module.full_name, binding.name)
        except DependencyError:
            raise
        except Exception as error:
            raise InterceptorError(binding.full_name, error) from error
        logger.debug(
            "Interceptor from %r applied to %s",
            interceptor.module_name,
            binding.full_name,
        )
    return value


def _apply(transform: Callable, value: Any, module_name: str, local_name: str) -> Any:
    if _accepts_three_arguments(transform):
        return transform(value, module_name, local_name)
    return transform(value)


def _accepts_three_arguments(transform: Callable) -> bool:
    try:
        inspect.signature(transform).bind(None, None, None)
    except TypeError:
        return False
    except ValueError:
        # no signature available, e.g. some builtins
        return False
    return True
