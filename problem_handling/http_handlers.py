from __future__ import annotations

import pydantic
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from problem_handling.dispatcher import ProblemDispatcher
from problem_handling.errors import DomainError
from problem_handling.logging import get_logger
from problem_handling.settings import ExceptionHandlingSettings
from problem_handling.tracing import Tracer


def describe_request(request: Request) -> str:
    return f"{request.method} {request.url.path}"


def register_exception_handlers(
    app: FastAPI,
    settings: ExceptionHandlingSettings | None = None,
    tracer: Tracer | None = None,
    logger_name: str = "problem_handling.errors",
) -> ProblemDispatcher:
    """Route domain, request-validation and unexpected errors through one dispatcher.

    ``HTTPException`` keeps FastAPI's own handler.
    """
    dispatcher = ProblemDispatcher(settings=settings, tracer=tracer, logger=get_logger(logger_name))
    app.state.problem_dispatcher = dispatcher

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        return dispatcher.dispatch(exc, describe_request(request)).to_response()

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return dispatcher.dispatch(exc, describe_request(request)).to_response()

    @app.exception_handler(pydantic.ValidationError)
    async def handle_model_validation(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
        return dispatcher.dispatch(exc, describe_request(request)).to_response()

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        return dispatcher.dispatch(exc, describe_request(request)).to_response()

    return dispatcher
