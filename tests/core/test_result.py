"""Result Type — tests for Success/Failure values."""

from transfer_service.core.domain_types import ErrorKind
from transfer_service.core.result import Failure, Success, fail


def test_success_carries_value():
    result = Success(42)
    assert result.is_success
    assert result.value == 42


def test_fail_builds_failure_with_details():
    result = fail(ErrorKind.TRANSFER_NOT_FOUND, "missing", code="X")
    assert isinstance(result, Failure)
    assert not result.is_success
    assert result.kind == ErrorKind.TRANSFER_NOT_FOUND
    assert result.error.details == {"code": "X"}


def test_match_narrows():
    match fail(ErrorKind.FORBIDDEN, "no"):
        case Success():
            matched = "success"
        case Failure(error=error):
            matched = error.kind
    assert matched == ErrorKind.FORBIDDEN
