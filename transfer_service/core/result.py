"""Result Type — explicit success/failure values returned at every handler boundary.

Invariants:
    - A handler returns exactly one of Success(value) or Failure(error)
    - Failure always carries an ErrorDescriptor with a typed ErrorKind
    - Expected domain failures travel as Failure; only faults are raised

Design Decisions:
    - Two frozen dataclasses joined by a Union alias: consumers use `match` or
      `isinstance`, and the type checker narrows on either
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

from transfer_service.core.domain_types import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class ErrorDescriptor:
    """Typed error kind plus a human-readable message for the caller."""
    kind: ErrorKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error: ErrorDescriptor

    @property
    def is_success(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


Result = Union[Success[T], Failure]


def fail(kind: ErrorKind, message: str, **details: Any) -> Failure:
    """Shorthand for building a Failure with optional structured details."""
    return Failure(ErrorDescriptor(kind, message, details))
