"""Result → HTTP — unwraps handler Results at the route boundary.

Invariants:
    - Success → its value; Failure → the matching TransferServiceError is raised
      and rendered by the global error handlers
"""

from typing import TypeVar

from transfer_service.core.errors import error_from_descriptor
from transfer_service.core.result import Failure, Result, Success

T = TypeVar("T")


def unwrap(result: Result[T]) -> T:
    match result:
        case Success(value=value):
            return value
        case Failure(error=error):
            raise error_from_descriptor(error)
    raise TypeError(f"Not a Result: {result!r}")
