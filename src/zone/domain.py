"""Domain models used throughout the framework."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Union

__all__ = ["Access", "ResolutionState", "Resolved", "State"]


class Access(IntEnum):
    """Visibility of a binding, ordered so that a larger level sees more.

    A binding is accessible to a search running at level ``access`` when
    ``binding.access <= access``.
    """

    PUBLIC = 0
    PROTECTED = 1
    PRIVATE = 2


class ResolutionState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"


@dataclass(frozen=True)
class Resolved:
    """The terminal state of a binding, holding its memoised value.

    Attributes:
        value: The value produced by the binding after all interceptors ran.
    """

    value: Any


State = Union[ResolutionState, Resolved]
