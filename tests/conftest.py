from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from problem_handling.settings import ExceptionHandlingSettings


@pytest.fixture(autouse=True)
def clean_log_context() -> Iterator[None]:
    """Every test starts and ends with an empty structlog context."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def settings() -> ExceptionHandlingSettings:
    """Defaults without reading a local .env file."""
    return ExceptionHandlingSettings(_env_file=None)


def make_settings(**overrides: object) -> ExceptionHandlingSettings:
    return ExceptionHandlingSettings(_env_file=None, **overrides)  # type: ignore[arg-type]
