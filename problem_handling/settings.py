from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from problem_handling.error_codes import error_type_uri

DEFAULT_SENSITIVE_FIELDS = ("password", "email", "ssn", "creditCard", "phoneNumber")
DEFAULT_BASE_ERROR_URI = "https://api.company.com/errors"
LOG_LEVELS = frozenset({"ERROR", "WARN", "INFO", "OFF"})

_log = logging.getLogger("problem_handling.settings")


class ExceptionHandlingSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="APP_EXCEPTION_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    # Development only: tracebacks end up in client responses.
    include_stack_trace: bool = False
    include_cause: bool = False
    log_level: str = "ERROR"
    # CSV string or list (env: APP_EXCEPTION_SENSITIVE_FIELDS=password,ssn)
    sensitive_fields: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_SENSITIVE_FIELDS))
    expose_error_codes: bool = True
    base_error_uri: str = DEFAULT_BASE_ERROR_URI

    @field_validator("sensitive_fields", mode="before")
    @classmethod
    def _parse_sensitive_fields(cls, value: object) -> object:
        if isinstance(value, str):
            value = [part.strip() for part in value.split(",")]
        if isinstance(value, (list, tuple, set, frozenset)):
            ordered: list[str] = []
            for item in value:
                name = str(item).strip()
                if name and name not in ordered:
                    ordered.append(name)
            return ordered
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if value is None:
            return "ERROR"
        if isinstance(value, str):
            level = value.strip().upper()
            if level == "WARNING":
                level = "WARN"
            if level not in LOG_LEVELS:
                raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}, got {value!r}")
            return level
        return value

    @field_validator("base_error_uri", mode="before")
    @classmethod
    def _strip_base_error_uri(cls, value: object) -> object:
        if value is None:
            return DEFAULT_BASE_ERROR_URI
        if isinstance(value, str):
            return value.strip().rstrip("/") or DEFAULT_BASE_ERROR_URI
        return value

    @model_validator(mode="after")
    def _warn_stack_trace_exposure(self) -> ExceptionHandlingSettings:
        if self.include_stack_trace:
            _log.warning("APP_EXCEPTION_INCLUDE_STACK_TRACE is enabled. Never enable it in production.")
        return self

    def should_log_errors(self) -> bool:
        return self.log_level != "OFF"

    def is_sensitive_field(self, field_name: str | None) -> bool:
        """Match a field path against the sensitive list.

        ``"email"`` matches ``email``, ``user.email`` and ``data.user.email.verified``.
        """
        if not field_name or not field_name.strip():
            return False
        return any(
            field_name == sensitive
            or field_name.endswith(f".{sensitive}")
            or f".{sensitive}." in field_name
            for sensitive in self.sensitive_fields
        )

    def build_error_type_uri(self, error_code: str | None) -> str:
        return error_type_uri(self.base_error_uri, error_code)


@lru_cache
def get_settings() -> ExceptionHandlingSettings:
    return ExceptionHandlingSettings()
