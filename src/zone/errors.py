__all__ = [
    "DependencyError",
    "DeclarationError",
    "SealedModuleError",
    "ModuleConfigurationError",
    "ResolutionError",
    "NotFoundError",
    "UnknownModuleError",
    "CyclicDependencyError",
    "ProducerError",
    "InterceptorError",
]


class DependencyError(Exception):
    """Raised when a binding cannot be declared or resolved.

    Attributes:
        message: The bare description of the failure.
        resolution_path: Full names of the bindings that were being resolved
            while the error propagated, innermost first.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.resolution_path: list[str] = []

    def within(self, full_name: str) -> "DependencyError":
        """Record that the error surfaced while resolving ``full_name``."""
        self.resolution_path.append(full_name)
        return self

    def __str__(self) -> str:
        if not self.resolution_path:
            return self.message
        return f"{self.message} (while resolving {' <- '.join(self.resolution_path)})"


class DeclarationError(DependencyError):
    """Raised when a binding, module or descriptor is declared incorrectly."""

    pass


class SealedModuleError(DeclarationError):
    """Raised when registering on a module that has already been searched."""

    pass


class ModuleConfigurationError(DeclarationError):
    """Raised when a module's imports are set more than once."""

    pass


class ResolutionError(DependencyError):
    """Raised when a binding's value cannot be produced."""

    pass


class NotFoundError(ResolutionError):
    pass


class UnknownModuleError(ResolutionError):
    pass


class CyclicDependencyError(ResolutionError):
    pass


class ProducerError(ResolutionError):
    """Raised when a producer function itself fails.

    The original exception is chained as ``__cause__`` and kept on ``error``.
    """

    def __init__(self, full_name: str, error: Exception):
        super().__init__(f"Failed to resolve {full_name}\n{error!r}")
        self.full_name = full_name
        self.error = error


class InterceptorError(ResolutionError):
    """Raised when an interceptor's transform fails on a binding's value."""

    def __init__(self, full_name: str, error: Exception):
        super().__init__(f"Interceptor for {full_name} failed\n{error!r}")
        self.full_name = full_name
        self.error = error
