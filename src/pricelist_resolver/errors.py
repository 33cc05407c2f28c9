"""
Error taxonomy for rule resolution.

A product that cannot be found is not an error: ProductResolver.resolve
returns None for it.
"""
from typing import Optional


class ResolverError(Exception):
    """Base class for resolver failures."""


class InvalidArgument(ResolverError, ValueError):
    """Raised when a caller passes arguments the engine cannot work with."""


class BackendError(ResolverError):
    """Raised when a call to the pricing backend fails (auth, lookup or search)."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.message = message
        self.operation = operation
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message
