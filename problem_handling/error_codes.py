from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import overload


@dataclass(frozen=True, slots=True)
class ErrorCode:
    """Stable error code paired with a default message and HTTP status."""

    code: str
    default_message: str
    http_status: int

    @overload
    @classmethod
    def of(cls, code: str, http_status: int, /) -> ErrorCode: ...

    @overload
    @classmethod
    def of(cls, code: str, default_message: str, http_status: int, /) -> ErrorCode: ...

    @classmethod
    def of(cls, code: str, *args: str | int) -> ErrorCode:
        """Create an error code, deriving the message from the code when omitted.

        ``ErrorCode.of("RESOURCE_NOT_FOUND", 404)`` gets ``"resource not found"``.
        """
        if len(args) == 1:
            (http_status,) = args
            default_message = code.replace("_", " ").lower()
        elif len(args) == 2:
            default_message, http_status = args
        else:
            raise TypeError(f"ErrorCode.of() takes 2 or 3 positional arguments ({len(args) + 1} given)")
        return cls(code=code, default_message=str(default_message), http_status=int(http_status))


class CommonErrorCodes:
    RESOURCE_NOT_FOUND = ErrorCode.of("RESOURCE_NOT_FOUND", "Resource not found", HTTPStatus.NOT_FOUND)
    RESOURCE_ALREADY_EXISTS = ErrorCode.of("RESOURCE_ALREADY_EXISTS", "Resource already exists", HTTPStatus.CONFLICT)

    VALIDATION_ERROR = ErrorCode.of("VALIDATION_ERROR", "Validation failed", HTTPStatus.UNPROCESSABLE_ENTITY)
    FIELD_VALIDATION_ERROR = ErrorCode.of(
        "FIELD_VALIDATION_ERROR",
        "Field validation failed",
        HTTPStatus.UNPROCESSABLE_ENTITY,
    )
    MULTIPLE_FIELD_VALIDATION_ERROR = ErrorCode.of(
        "MULTIPLE_FIELD_VALIDATION_ERROR",
        "Multiple field validation errors",
        HTTPStatus.UNPROCESSABLE_ENTITY,
    )

    UNAUTHORIZED = ErrorCode.of("UNAUTHORIZED", "Unauthorized access", HTTPStatus.UNAUTHORIZED)
    FORBIDDEN = ErrorCode.of("FORBIDDEN", "Access forbidden", HTTPStatus.FORBIDDEN)

    INTERNAL_SERVER_ERROR = ErrorCode.of(
        "INTERNAL_SERVER_ERROR",
        "Internal server error",
        HTTPStatus.INTERNAL_SERVER_ERROR,
    )
    SERVICE_UNAVAILABLE = ErrorCode.of(
        "SERVICE_UNAVAILABLE",
        "Service temporarily unavailable",
        HTTPStatus.SERVICE_UNAVAILABLE,
    )


def error_type_uri(base_uri: str, error_code: str | None) -> str:
    """Problem ``type`` URI for a code: ``VALIDATION_ERROR`` becomes ``{base}/validation-error``."""
    if not error_code or not error_code.strip():
        return f"{base_uri}/unknown"
    return f"{base_uri}/{error_code.lower().replace('_', '-')}"
