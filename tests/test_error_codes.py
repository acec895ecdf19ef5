from __future__ import annotations

import dataclasses
from http import HTTPStatus

import pytest

from problem_handling.error_codes import CommonErrorCodes, ErrorCode


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("RESOURCE_NOT_FOUND", "resource not found"),
        ("INSUFFICIENT_FUNDS", "insufficient funds"),
        ("TIMEOUT", "timeout"),
        ("Mixed_Case_Code", "mixed case code"),
    ],
)
def test_error_code_derives_message_from_code(code: str, expected: str) -> None:
    error_code = ErrorCode.of(code, 400)
    assert error_code.code == code
    assert error_code.default_message == expected
    assert error_code.http_status == 400


def test_error_code_with_explicit_message_accepts_http_status_enum() -> None:
    error_code = ErrorCode.of("RESOURCE_NOT_FOUND", "Resource not found", HTTPStatus.NOT_FOUND)
    assert error_code.default_message == "Resource not found"
    assert error_code.http_status == 404
    assert type(error_code.http_status) is int


def test_error_code_is_immutable() -> None:
    error_code = ErrorCode.of("CONFLICT_STATE", 409)
    with pytest.raises(dataclasses.FrozenInstanceError):
        error_code.code = "OTHER"  # type: ignore[misc]


def test_error_code_of_rejects_wrong_arity() -> None:
    with pytest.raises(TypeError):
        ErrorCode.of("ONLY_CODE")  # type: ignore[call-overload]


def test_common_error_codes_catalogue() -> None:
    assert CommonErrorCodes.RESOURCE_NOT_FOUND == ErrorCode("RESOURCE_NOT_FOUND", "Resource not found", 404)
    assert CommonErrorCodes.RESOURCE_ALREADY_EXISTS.http_status == 409
    assert CommonErrorCodes.VALIDATION_ERROR.http_status == 422
    assert CommonErrorCodes.UNAUTHORIZED.http_status == 401
    assert CommonErrorCodes.FORBIDDEN.default_message == "Access forbidden"
    assert CommonErrorCodes.INTERNAL_SERVER_ERROR.http_status == 500
    assert CommonErrorCodes.SERVICE_UNAVAILABLE.default_message == "Service temporarily unavailable"
