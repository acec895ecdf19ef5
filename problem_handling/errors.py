from __future__ import annotations

from collections.abc import Iterable, Mapping
from http import HTTPStatus
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Literal, TypeVar

from problem_handling.error_codes import CommonErrorCodes, ErrorCode
from problem_handling.error_codes import error_type_uri as type_uri_for_code

if TYPE_CHECKING:
    from problem_handling.binding import BindingResult

ErrorCategory = Literal["BUSINESS", "VALIDATION", "SPRING_VALIDATION", "GENERIC"]

CATEGORY = "category"
BUSINESS_RULE = "BUSINESS_RULE"

_BuilderT = TypeVar("_BuilderT", bound="DomainErrorBuilder")


class DomainError(Exception):
    """Base for errors that translate into a problem response.

    Only the concrete ``BusinessError`` and ``ValidationError`` are raised.
    ``details`` is a read-only snapshot taken at construction time.
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        http_status: int = HTTPStatus.BAD_REQUEST,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.http_status = int(http_status)
        self.details: Mapping[str, Any] = MappingProxyType(dict(details or {}))

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error_code={self.error_code!r}, "
            f"http_status={self.http_status}, message={self.message!r})"
        )

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.http_status < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.http_status < 600

    @property
    def is_bad_request(self) -> bool:
        return self.http_status == HTTPStatus.BAD_REQUEST

    @property
    def is_not_found(self) -> bool:
        return self.http_status == HTTPStatus.NOT_FOUND

    def error_type_uri(self, base_uri: str) -> str:
        return type_uri_for_code(base_uri.rstrip("/"), self.error_code)


class DomainErrorBuilder:
    """Accumulates status and details for a domain error.

    Each ``build()`` works on copies, so later builder calls never reach an
    error that was already built.
    """

    default_status: ClassVar[int] = HTTPStatus.BAD_REQUEST

    def __init__(self, error_code: str, message: str, http_status: int | None = None) -> None:
        self._error_code = error_code
        self._message = message
        self._http_status = int(http_status) if http_status is not None else int(self.default_status)
        self._details: dict[str, Any] = {}

    @classmethod
    def from_error_code(cls: type[_BuilderT], error_code: ErrorCode) -> _BuilderT:
        return cls(error_code.code, error_code.default_message, error_code.http_status)

    def http_status(self: _BuilderT, status: int) -> _BuilderT:
        self._http_status = int(status)
        return self

    def detail(self: _BuilderT, key: str, value: Any) -> _BuilderT:
        self._details[key] = value
        return self

    def details(self: _BuilderT, details: Mapping[str, Any]) -> _BuilderT:
        self._details.update(details)
        return self

    def bad_request(self: _BuilderT) -> _BuilderT:
        return self.http_status(HTTPStatus.BAD_REQUEST)

    def not_found(self: _BuilderT) -> _BuilderT:
        return self.http_status(HTTPStatus.NOT_FOUND)

    def conflict(self: _BuilderT) -> _BuilderT:
        return self.http_status(HTTPStatus.CONFLICT)

    def unprocessable_entity(self: _BuilderT) -> _BuilderT:
        return self.http_status(HTTPStatus.UNPROCESSABLE_ENTITY)

    def build(self) -> DomainError:
        raise NotImplementedError


class BusinessError(DomainError):
    """Business rule violation with arbitrary key/value context."""

    @classmethod
    def builder(cls, error_code: ErrorCode | str, message: str | None = None) -> BusinessErrorBuilder:
        if isinstance(error_code, ErrorCode):
            return BusinessErrorBuilder.from_error_code(error_code)
        return BusinessErrorBuilder(error_code, message or "")

    @classmethod
    def of(cls, error_code: ErrorCode, *details: Any) -> BusinessError:
        """Build from an error code and flat ``key, value, key, value`` pairs.

        A trailing key without a value is dropped.
        """
        builder = cls.builder(error_code)
        for index in range(0, len(details) - 1, 2):
            builder.detail(str(details[index]), details[index + 1])
        return builder.build()

    @classmethod
    def customer_already_exists(cls, customer_id: str) -> BusinessError:
        return cls(
            f"Customer with ID '{customer_id}' already exists",
            "CUSTOMER_ALREADY_EXISTS",
            HTTPStatus.CONFLICT,
            {"customerId": customer_id, CATEGORY: BUSINESS_RULE},
        )

    @classmethod
    def customer_not_found(cls, customer_id: str) -> BusinessError:
        return cls(
            f"Customer with ID '{customer_id}' not found",
            "CUSTOMER_NOT_FOUND",
            HTTPStatus.NOT_FOUND,
            {"customerId": customer_id, CATEGORY: BUSINESS_RULE},
        )

    @classmethod
    def insufficient_funds(cls, account_id: str, required: float, available: float) -> BusinessError:
        return cls(
            "Insufficient funds for transaction",
            "INSUFFICIENT_FUNDS",
            HTTPStatus.BAD_REQUEST,
            {
                "accountId": account_id,
                "required": required,
                "available": available,
                "shortfall": required - available,
                CATEGORY: BUSINESS_RULE,
            },
        )


class BusinessErrorBuilder(DomainErrorBuilder):
    def build(self) -> BusinessError:
        return BusinessError(self._message, self._error_code, self._http_status, dict(self._details))


class ValidationError(DomainError):
    """Validation failure with per-field and object-level messages. Always 422 by default."""

    def __init__(
        self,
        message: str,
        error_code: str,
        http_status: int = HTTPStatus.UNPROCESSABLE_ENTITY,
        details: Mapping[str, Any] | None = None,
        field_errors: Mapping[str, str] | None = None,
        global_errors: Iterable[str] | None = None,
    ) -> None:
        super().__init__(message, error_code, http_status, details)
        self.field_errors: Mapping[str, str] = MappingProxyType(dict(field_errors or {}))
        self.global_errors: tuple[str, ...] = tuple(global_errors or ())

    @property
    def has_field_errors(self) -> bool:
        return bool(self.field_errors)

    @property
    def has_global_errors(self) -> bool:
        return bool(self.global_errors)

    @classmethod
    def builder(cls, error_code: ErrorCode | str, message: str | None = None) -> ValidationErrorBuilder:
        if isinstance(error_code, ErrorCode):
            # Validation errors stay 422 whatever status the code carries.
            return ValidationErrorBuilder(error_code.code, error_code.default_message)
        return ValidationErrorBuilder(error_code, message or "")

    @classmethod
    def field_error(cls, field: str, message: str) -> ValidationError:
        return cls.builder(CommonErrorCodes.FIELD_VALIDATION_ERROR).field_error(field, message).build()

    @classmethod
    def field_errors_of(cls, errors: Mapping[str, str]) -> ValidationError:
        return cls.builder(CommonErrorCodes.MULTIPLE_FIELD_VALIDATION_ERROR).field_errors(errors).build()

    @classmethod
    def from_binding_result(cls, result: BindingResult) -> ValidationError:
        builder = cls.builder(
            CommonErrorCodes.VALIDATION_ERROR.code,
            f"Validation failed for object '{result.object_name}'",
        )
        for field, message in result.field_errors:
            builder.field_error(field, message)
        for message in result.global_errors:
            builder.global_error(message)
        return builder.build()


class ValidationErrorBuilder(DomainErrorBuilder):
    default_status = HTTPStatus.UNPROCESSABLE_ENTITY

    def __init__(self, error_code: str, message: str, http_status: int | None = None) -> None:
        super().__init__(error_code, message, http_status)
        self._field_errors: dict[str, str] = {}
        self._global_errors: list[str] = []

    def field_error(self, field: str, message: str) -> ValidationErrorBuilder:
        self._field_errors[field] = message
        return self

    def field_errors(self, errors: Mapping[str, str]) -> ValidationErrorBuilder:
        self._field_errors.update(errors)
        return self

    def global_error(self, message: str) -> ValidationErrorBuilder:
        self._global_errors.append(message)
        return self

    def global_errors(self, errors: Iterable[str]) -> ValidationErrorBuilder:
        self._global_errors.extend(errors)
        return self

    def build(self) -> ValidationError:
        message = self._message
        if not message or not message.strip():
            # Counts field errors only.
            message = f"Validation failed with {len(self._field_errors)} field errors"

        field_errors = dict(self._field_errors)
        global_errors = list(self._global_errors)
        details = dict(self._details)
        details["fieldErrors"] = MappingProxyType(dict(field_errors))
        details["globalErrors"] = tuple(global_errors)
        details["errorCount"] = len(field_errors) + len(global_errors)
        details[CATEGORY] = "VALIDATION"

        return ValidationError(
            message,
            self._error_code,
            self._http_status,
            details,
            field_errors,
            global_errors,
        )


def error_category(error: DomainError) -> ErrorCategory:
    return "VALIDATION" if isinstance(error, ValidationError) else "BUSINESS"
