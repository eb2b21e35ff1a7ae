"""Descriptors: the recipes from which a binding's value is produced.

A descriptor is either a literal value (``ValueDescriptor``) or a producer
function together with the names of the dependencies it needs
(``FunctionDescriptor``). Dependency names are taken from the producer's
signature, from ``Annotated`` metadata on its parameters, or from an explicit
list supplied at registration time.
"""

import inspect
import logging
from dataclasses import dataclass, replace
from typing import (
    Annotated,
    Any,
    Callable,
    Optional,
    Sequence,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from zone.domain import Access
from zone.errors import DeclarationError

__all__ = [
    "ValueDescriptor",
    "FunctionDescriptor",
    "Descriptor",
    "OPTIONAL",
    "FREE",
    "RECEIVER",
    "make_value_descriptor",
    "make_function_descriptor",
    "make_constructor_descriptor",
    "guess_descriptor",
    "formal_parameters",
    "parse_binding_name",
    "inferred_name",
    "validate_dependency_name",
]

logger = logging.getLogger(__name__)

OPTIONAL = "?"
FREE = "#"
RECEIVER = "self"

_ACCESS_SIGILS = {
    "-": Access.PRIVATE,
    "#": Access.PROTECTED,
    "+": Access.PUBLIC,
}


@dataclass(frozen=True)
class ValueDescriptor:
    value: Any


@dataclass(frozen=True)
class FunctionDescriptor:
    """Describes how to call a producer function.

    Attributes:
        names: Dependency names, one per positional parameter of ``func``
            (excluding a leading receiver). May carry a ``?`` or ``#`` sigil.
        func: The producer: a function, a class, or any other callable.
        is_constructor: True if the producer is invoked with constructor
            semantics (see ``zone.injection``).
        receives_context: True if ``func`` declares a leading ``self``
            parameter that is filled with the injection context.
    """

    names: tuple[str, ...]
    func: Callable
    is_constructor: bool = False
    receives_context: bool = False

    def validate_dependency_names(self, allowed: str, not_allowed: str) -> None:
        """Check every dependency name against the sigils a call site accepts.

        Args:
            allowed: Sigils that may appear, at most one per name, and only
                as its first character.
            not_allowed: Characters that may not appear anywhere in a name.

        Raises:
            DeclarationError: If any name is malformed for this call site.
        """
        for name in self.names:
            validate_dependency_name(name, allowed, not_allowed)


Descriptor = Union[ValueDescriptor, FunctionDescriptor]


def validate_dependency_name(name: str, allowed: str, not_allowed: str) -> None:
    sigils = 0
    for sigil in allowed:
        index = name.find(sigil)
        if index > 0:
            raise DeclarationError(f"Invalid injection parameter {name}")
        if index == 0:
            sigils += 1
            if sigils > 1:
                raise DeclarationError(f"Invalid injection parameter {name}")
    if any(c in name for c in not_allowed):
        raise DeclarationError(f"Invalid injection parameter {name}")
    if len(name) == sigils:
        raise DeclarationError(f"Invalid injection parameter {name!r}")


def parse_binding_name(name: str) -> tuple[str, Access, str]:
    """Split a binding name into its local name, access level and sigil.

    Example:
        >>> parse_binding_name("-secret")   # ("secret", Access.PRIVATE, "-")
        >>> parse_binding_name("#shared")   # ("shared", Access.PROTECTED, "#")
        >>> parse_binding_name("+api")      # ("api", Access.PUBLIC, "")
        >>> parse_binding_name("api")       # ("api", Access.PUBLIC, "")
    """
    if name and name[0] in _ACCESS_SIGILS:
        access = _ACCESS_SIGILS[name[0]]
        return name[1:], access, "" if access is Access.PUBLIC else name[0]
    return name, Access.PUBLIC, ""


def inferred_name(target: Any) -> str:
    """Derive a binding name from a class or function, removing any 'make_' prefix.

    Example:
        >>> inferred_name(Database)       # Returns "Database"
        >>> inferred_name(make_database)  # Returns "database"
    """
    if inspect.isclass(target):
        return target.__name__

    if target.__name__.startswith("make_"):
        return target.__name__[5:]
    else:
        return target.__name__


def formal_parameters(func: Callable) -> Optional[tuple[list[str], bool]]:
    """Extract dependency names from a producer's signature.

    Each positional parameter contributes its name, unless it is annotated
    with ``Annotated[T, "dependency.name"]``, in which case the first string
    metadata item is used. A leading parameter called ``self`` is the
    receiver and is not a dependency.

    Args:
        func: The producer to inspect.

    Returns:
        A ``(names, receives_context)`` pair, or None if the positional arity
        of ``func`` cannot be determined statically.

    Example:
        >>> def service(self, db, cache: Annotated[Cache, "?caches.redis"]): ...
        >>> formal_parameters(service)
        (['db', '?caches.redis'], True)
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        logger.debug("Failed to parse the signature of %r", func)
        return None

    hints = _type_hints(func)
    names = []
    receives_context = False
    for index, (name, param) in enumerate(sig.parameters.items()):
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            continue
        if index == 0 and name == RECEIVER:
            receives_context = True
            continue
        names.append(_dependency_name(hints.get(name), name))
    return names, receives_context


def _type_hints(func: Callable) -> dict[str, Any]:
    target = func.__init__ if inspect.isclass(func) else func
    try:
        return get_type_hints(target, include_extras=True)
    except TypeError:
        # not a function, class or module: no annotations to read
        return {}


def _dependency_name(annotation: Any, name: str) -> str:
    if get_origin(annotation) is Annotated:
        _, *metadata = get_args(annotation)
        return next((m for m in metadata if isinstance(m, str)), name)
    return name


def make_value_descriptor(value: Any) -> ValueDescriptor:
    if isinstance(value, ValueDescriptor):
        return value
    return ValueDescriptor(value)


def make_function_descriptor(args: Union[Sequence[Any], FunctionDescriptor]) -> FunctionDescriptor:
    """Build a function descriptor from the arguments of a registration call.

    Accepted forms:
        - ``(descriptor,)``: an existing descriptor, returned as is.
        - ``(func,)``: dependency names taken from the signature of ``func``.
        - ``([name, ..., func],)``: bracket notation, names then producer.
        - ``(names, func)``: an explicit list of names and the producer.

    Raises:
        DeclarationError: If the arguments match none of the forms, or the
            declared names do not match the producer's arity.
    """
    if isinstance(args, FunctionDescriptor):
        return args
    args = list(args)
    if len(args) == 1 and isinstance(args[0], FunctionDescriptor):
        return args[0]

    if len(args) == 1 and isinstance(args[0], (list, tuple)) and args[0]:
        *names, func = args[0]
        return _explicit_descriptor(names, func)
    if len(args) == 2 and isinstance(args[0], (list, tuple)):
        return _explicit_descriptor(args[0], args[1])
    if len(args) == 1 and callable(args[0]):
        formals = formal_parameters(args[0])
        if formals is None:
            raise DeclarationError(
                f"Failed to determine function signature of {args[0]!r}"
            )
        names, receives_context = formals
        return FunctionDescriptor(tuple(names), args[0], False, receives_context)

    raise DeclarationError(f"Invalid function description {args!r}")


def _explicit_descriptor(names: Sequence[str], func: Any) -> FunctionDescriptor:
    if not callable(func):
        raise DeclarationError(f"Not a function: {func!r}")
    if not all(isinstance(name, str) for name in names):
        raise DeclarationError(f"Dependency names must be strings: {list(names)!r}")

    formals = formal_parameters(func)
    receives_context = False
    if formals is not None:
        formal_names, receives_context = formals
        if len(formal_names) != len(names):
            raise DeclarationError(
                f"Formals and parameter names do not match: "
                f"{list(names)} declared for {len(formal_names)} parameters of {func!r}"
            )
    return FunctionDescriptor(tuple(names), func, False, receives_context)


def make_constructor_descriptor(
    args: Union[Sequence[Any], FunctionDescriptor],
) -> FunctionDescriptor:
    return replace(make_function_descriptor(args), is_constructor=True)


def guess_descriptor(args: Union[Sequence[Any], Descriptor]) -> Descriptor:
    """Treat a single non-callable argument as a value, anything else as a function."""
    if isinstance(args, (ValueDescriptor, FunctionDescriptor)):
        return args
    args = list(args)
    if len(args) == 1 and not callable(args[0]) and not isinstance(
        args[0], FunctionDescriptor
    ):
        return make_value_descriptor(args[0])
    return make_function_descriptor(args)
