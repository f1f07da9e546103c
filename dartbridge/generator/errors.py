"""Diagnostics raised while generating bindings."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """Position of a declaration inside a definition file."""

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class GenerationError(RuntimeError):
    """Aborts the current generation pass."""

    def __init__(self, message: str, location: SourceLocation | None = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.location}: {self.message}"


class ValidationError(GenerationError):
    """Raised when a definition file is structurally invalid."""


class UnresolvedType(GenerationError):
    """Raised when a custom type name has no registry entry."""


class UnsupportedType(GenerationError):
    """Raised when a type shows up where it cannot be rendered."""
