"""RFC 7807 / RFC 9457 problem envelope."""
from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

PROBLEM_MEDIA_TYPE = "application/problem+json"


def default_title(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


@dataclass(slots=True)
class ProblemDetail:
    status: int
    detail: str
    type: str = "about:blank"
    title: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_status_and_detail(cls, status: int, detail: str) -> ProblemDetail:
        return cls(status=int(status), detail=detail)

    def set_property(self, name: str, value: Any) -> None:
        self.extensions[name] = value

    def to_dict(self) -> dict[str, Any]:
        """Flatten into the wire shape. Extensions are written over the standard members."""
        payload: dict[str, Any] = {
            "type": self.type,
            "title": self.title if self.title is not None else default_title(self.status),
            "status": self.status,
            "detail": self.detail,
        }
        payload.update(self.extensions)
        return {name: _encode(value) for name, value in payload.items()}

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status,
            content=self.to_dict(),
            media_type=PROBLEM_MEDIA_TYPE,
        )


def _encode(value: Any) -> Any:
    # A member jsonable_encoder cannot handle is sent as its string form.
    try:
        return jsonable_encoder(value)
    except (TypeError, ValueError):
        return str(value)
