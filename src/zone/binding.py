"""Bindings: named, producible values living in a module."""

import logging
from typing import TYPE_CHECKING, Any

from zone.descriptors import Descriptor, ValueDescriptor
from zone.domain import Access, Resolved, ResolutionState, State
from zone.errors import CyclicDependencyError, DependencyError, ProducerError
from zone.injection import inject_function
from zone.interceptors import intercept
from zone.paths import make_full_name

if TYPE_CHECKING:
    from zone.module import Module

__all__ = ["Binding"]

logger = logging.getLogger(__name__)


class Binding:
    """A named value in a module, produced from its descriptor on first use.

    The value is produced at most once per binding: the first successful
    ``resolve`` runs the producer and any interceptors, and memoises the
    result. A failed attempt leaves the binding unresolved, so it may be
    retried.
    """

    def __init__(self, module: "Module", name: str, access: Access, descriptor: Descriptor):
        if not isinstance(access, Access):
            raise ValueError(f"Invalid access {access!r}")
        self.module = module
        self.name = name
        self.full_name = make_full_name(module.full_name, name)
        self.access = access
        self.descriptor = descriptor
        self._state: State = ResolutionState.UNRESOLVED
        # set while interceptors run, after the resolving mark is cleared
        self._intercepting = False

    def __repr__(self) -> str:
        return f"Binding({self.full_name!r}, {self.access.name}, {self.state_name})"

    @property
    def state_name(self) -> str:
        if isinstance(self._state, Resolved):
            return "resolved"
        return self._state.value

    @property
    def is_resolved(self) -> bool:
        return isinstance(self._state, Resolved)

    def is_accessible(self, access: Access) -> bool:
        return self.access <= access

    def copy(self, module: "Module") -> "Binding":
        """An unresolved copy of this binding, installed in ``module``."""
        return Binding(module, self.name, self.access, self.descriptor)

    def resolve(self) -> Any:
        """Produce, intercept and memoise this binding's value.

        Raises:
            CyclicDependencyError: If the binding is already being resolved
                further up the call stack.
            ProducerError: If the producer raises.
            DependencyError: If any dependency or interceptor fails; the
                error's resolution path records this binding.
        """
        state = self._state
        if isinstance(state, Resolved):
            return state.value
        if state is ResolutionState.RESOLVING:
            raise CyclicDependencyError(f"Cyclic dependency detected with {self.full_name}")
        if self._intercepting:
            raise CyclicDependencyError(
                f"Cyclic dependency detected with {self.full_name} in its interceptors"
            )

        self._state = ResolutionState.RESOLVING
        try:
            value = self._produce()
        except DependencyError as error:
            raise error.within(self.full_name)
        except Exception as error:
            raise ProducerError(self.full_name, error) from error
        finally:
            self._state = ResolutionState.UNRESOLVED

        self._intercepting = True
        try:
            value = intercept(self, value)
        except DependencyError as error:
            raise error.within(self.full_name)
        finally:
            self._intercepting = False

        self._state = Resolved(value)
        logger.debug("Resolved %s", self.full_name)
        return value

    def _produce(self) -> Any:
        if isinstance(self.descriptor, ValueDescriptor):
            return self.descriptor.value
        return inject_function(self.module, Access.PRIVATE, self.descriptor, False)()
