from __future__ import annotations

from problem_handling.binding import BindingResult
from problem_handling.dispatcher import ProblemDispatcher
from problem_handling.error_codes import CommonErrorCodes, ErrorCode
from problem_handling.errors import (
    BusinessError,
    BusinessErrorBuilder,
    DomainError,
    DomainErrorBuilder,
    ValidationError,
    ValidationErrorBuilder,
    error_category,
)
from problem_handling.http_handlers import register_exception_handlers
from problem_handling.problem import ProblemDetail
from problem_handling.settings import ExceptionHandlingSettings, get_settings
from problem_handling.tracing import ContextVarTracer, NullTracer, Tracer

__all__ = [
    "BindingResult",
    "BusinessError",
    "BusinessErrorBuilder",
    "CommonErrorCodes",
    "ContextVarTracer",
    "DomainError",
    "DomainErrorBuilder",
    "ErrorCode",
    "ExceptionHandlingSettings",
    "NullTracer",
    "ProblemDetail",
    "ProblemDispatcher",
    "Tracer",
    "ValidationError",
    "ValidationErrorBuilder",
    "error_category",
    "get_settings",
    "register_exception_handlers",
]
