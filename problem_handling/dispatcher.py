"""Translate raised errors into problem envelopes.

One dispatcher serves every error kind. Each call binds the error context
into the structlog context, emits one log event, builds the envelope and
restores the context before returning.
"""
from __future__ import annotations

import traceback
from collections.abc import Mapping
from datetime import datetime
from http import HTTPStatus
from typing import Any

import pydantic
from fastapi.exceptions import RequestValidationError
from structlog.typing import FilteringBoundLogger

from problem_handling.binding import BindingResult
from problem_handling.error_codes import CommonErrorCodes
from problem_handling.errors import DomainError, ValidationError, error_category
from problem_handling.logging import get_logger, scoped_log_context
from problem_handling.problem import ProblemDetail
from problem_handling.settings import ExceptionHandlingSettings, get_settings
from problem_handling.tracing import NullTracer, Tracer, resolve_trace_ids

ERROR_CODE = "error.code"
ERROR_HTTP_STATUS = "error.http_status"
ERROR_CATEGORY = "error.category"
VALIDATION_FIELD_COUNT = "validation.field_count"
VALIDATION_GLOBAL_COUNT = "validation.global_count"
VALIDATION_OBJECT_NAME = "validation.object_name"

VALIDATION_TITLE = "Validation Failed"
GENERIC_DETAIL = "An unexpected error occurred"
FRAMEWORK_VALIDATION_TYPE = "FRAMEWORK"
REDACTED_PREFIX = "[REDACTED] - "


class ProblemDispatcher:
    def __init__(
        self,
        settings: ExceptionHandlingSettings | None = None,
        tracer: Tracer | None = None,
        logger: FilteringBoundLogger | None = None,
        logger_name: str = "problem_handling.errors",
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.tracer: Tracer = tracer if tracer is not None else NullTracer()
        self.logger = logger if logger is not None else get_logger(logger_name)

    def dispatch(self, exc: BaseException, request: str | None = None) -> ProblemDetail:
        if isinstance(exc, ValidationError):
            return self.handle_validation_error(exc, request)
        if isinstance(exc, DomainError):
            return self.handle_domain_error(exc, request)
        if isinstance(exc, (RequestValidationError, pydantic.ValidationError)):
            return self.handle_request_validation(exc, request)
        return self.handle_unexpected(exc, request)

    def handle_domain_error(self, exc: DomainError, request: str | None = None) -> ProblemDetail:
        with scoped_log_context(
            **{
                ERROR_CODE: exc.error_code,
                ERROR_HTTP_STATUS: exc.http_status,
                ERROR_CATEGORY: error_category(exc),
            }
        ):
            trace_id, span_id = resolve_trace_ids(self.tracer)
            if self.settings.should_log_errors():
                self.logger.error(
                    "domain_error",
                    error_code=exc.error_code,
                    http_status=exc.http_status,
                    trace_id=trace_id,
                    span_id=span_id,
                    details=_plain(exc.details),
                    request=request,
                    exc_info=exc,
                )

            problem = ProblemDetail.for_status_and_detail(exc.http_status, exc.message)
            problem.type = self.settings.build_error_type_uri(exc.error_code)
            self._set_common_properties(problem, trace_id, span_id, exc.error_code)
            self._set_debug_properties(problem, exc)
            for key, value in exc.details.items():
                problem.set_property(key, value)
            return problem

    def handle_validation_error(self, exc: ValidationError, request: str | None = None) -> ProblemDetail:
        status = HTTPStatus.UNPROCESSABLE_ENTITY
        with scoped_log_context(
            **{
                ERROR_CODE: exc.error_code,
                ERROR_HTTP_STATUS: int(status),
                ERROR_CATEGORY: "VALIDATION",
                VALIDATION_FIELD_COUNT: len(exc.field_errors),
                VALIDATION_GLOBAL_COUNT: len(exc.global_errors),
            }
        ):
            trace_id, span_id = resolve_trace_ids(self.tracer)
            if self.settings.should_log_errors():
                self.logger.warning(
                    "validation_error",
                    error_code=exc.error_code,
                    http_status=int(status),
                    trace_id=trace_id,
                    span_id=span_id,
                    field_errors=dict(exc.field_errors),
                    global_errors=list(exc.global_errors),
                    details=_plain(exc.details),
                    request=request,
                )

            problem = ProblemDetail.for_status_and_detail(status, exc.message)
            problem.type = self.settings.build_error_type_uri(exc.error_code)
            problem.title = VALIDATION_TITLE
            self._set_common_properties(problem, trace_id, span_id, exc.error_code)
            self._set_validation_properties(problem, dict(exc.field_errors), list(exc.global_errors))
            for key, value in exc.details.items():
                problem.set_property(key, value)
            return problem

    def handle_request_validation(
        self,
        exc: RequestValidationError | pydantic.ValidationError,
        request: str | None = None,
    ) -> ProblemDetail:
        if isinstance(exc, pydantic.ValidationError):
            result = BindingResult.from_pydantic(exc)
        else:
            result = BindingResult.from_errors(exc.errors())

        field_errors = result.field_error_map()
        # Logs get the sanitized copy, the client gets the original messages.
        sanitized_errors = {
            name: f"{REDACTED_PREFIX}{message}" if self.settings.is_sensitive_field(name) else message
            for name, message in field_errors.items()
        }
        error_code = CommonErrorCodes.VALIDATION_ERROR.code
        status = HTTPStatus.UNPROCESSABLE_ENTITY

        with scoped_log_context(
            **{
                ERROR_CODE: error_code,
                ERROR_HTTP_STATUS: int(status),
                ERROR_CATEGORY: "SPRING_VALIDATION",
                VALIDATION_FIELD_COUNT: len(field_errors),
                VALIDATION_GLOBAL_COUNT: len(result.global_errors),
                VALIDATION_OBJECT_NAME: result.object_name,
            }
        ):
            trace_id, span_id = resolve_trace_ids(self.tracer)
            if self.settings.should_log_errors():
                # The exception itself is left out: its text carries submitted values.
                self.logger.warning(
                    "request_validation_failed",
                    error_code=error_code,
                    http_status=int(status),
                    trace_id=trace_id,
                    span_id=span_id,
                    object_name=result.object_name,
                    field_error_count=len(field_errors),
                    field_names=list(sanitized_errors),
                    sanitized_errors=sanitized_errors,
                    global_error_count=len(result.global_errors),
                    request=request,
                )

            problem = ProblemDetail.for_status_and_detail(
                status,
                f"Validation failed for object '{result.object_name}'",
            )
            problem.type = self.settings.build_error_type_uri(error_code)
            problem.title = VALIDATION_TITLE
            self._set_common_properties(problem, trace_id, span_id, error_code)
            problem.set_property("validationType", FRAMEWORK_VALIDATION_TYPE)
            self._set_validation_properties(problem, field_errors, list(result.global_errors))
            return problem

    def handle_unexpected(self, exc: BaseException, request: str | None = None) -> ProblemDetail:
        status = HTTPStatus.INTERNAL_SERVER_ERROR
        with scoped_log_context(**{ERROR_HTTP_STATUS: int(status), ERROR_CATEGORY: "GENERIC"}):
            trace_id, span_id = resolve_trace_ids(self.tracer)
            if self.settings.should_log_errors():
                self.logger.error(
                    "unhandled_error",
                    exception_type=type(exc).__name__,
                    http_status=int(status),
                    trace_id=trace_id,
                    span_id=span_id,
                    request=request,
                    exc_info=exc,
                )

            error_code = CommonErrorCodes.INTERNAL_SERVER_ERROR.code
            problem = ProblemDetail.for_status_and_detail(status, GENERIC_DETAIL)
            problem.type = self.settings.build_error_type_uri(error_code)
            self._set_common_properties(problem, trace_id, span_id, error_code)
            self._set_debug_properties(problem, exc)
            return problem

    def _set_common_properties(self, problem: ProblemDetail, trace_id: str, span_id: str, error_code: str) -> None:
        problem.set_property("timestamp", datetime.now().astimezone().isoformat())
        problem.set_property("traceId", trace_id)
        problem.set_property("spanId", span_id)
        if self.settings.expose_error_codes:
            problem.set_property("errorCode", error_code)

    def _set_validation_properties(
        self,
        problem: ProblemDetail,
        field_errors: dict[str, str],
        global_errors: list[str],
    ) -> None:
        problem.set_property("fieldErrors", field_errors)
        problem.set_property("globalErrors", global_errors)
        problem.set_property("errorCount", len(field_errors) + len(global_errors))

    def _set_debug_properties(self, problem: ProblemDetail, exc: BaseException) -> None:
        if self.settings.include_cause:
            cause = _cause_of(exc)
            if cause is not None:
                problem.set_property("cause", {"type": type(cause).__name__, "message": str(cause)})
        if self.settings.include_stack_trace:
            problem.set_property("stackTrace", format_stack_trace(exc))


def _plain(value: Any) -> Any:
    # Read-only views and tuples become dicts and lists so JSON renderers keep the structure.
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def _cause_of(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def format_stack_trace(exc: BaseException) -> list[str]:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).splitlines()
