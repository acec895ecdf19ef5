from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import pydantic

REQUEST_SOURCES = frozenset({"body", "query", "path", "header", "cookie"})


@dataclass(slots=True)
class BindingResult:
    """Field and object-level messages collected from a failed validation."""

    object_name: str
    field_errors: list[tuple[str, str]] = field(default_factory=list)
    global_errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(
        cls,
        errors: Iterable[Mapping[str, Any]],
        object_name: str | None = None,
        strip_source: bool = True,
    ) -> BindingResult:
        """Split pydantic-style error dicts into field and global errors.

        With ``strip_source`` the leading request source of a FastAPI location
        (``body``, ``query``...) is dropped from the path and becomes the object
        name. Plain model errors carry no source, so a field named ``body`` keeps
        its name there.
        """
        result = cls(object_name=object_name or "")
        sources: list[str] = []
        for error in errors:
            loc = tuple(error.get("loc") or ())
            message = str(error.get("msg", ""))
            if strip_source and loc and loc[0] in REQUEST_SOURCES:
                if loc[0] not in sources:
                    sources.append(str(loc[0]))
                loc = loc[1:]
            path = field_path(loc)
            if path:
                result.field_errors.append((path, message))
            else:
                result.global_errors.append(message)

        if not result.object_name:
            result.object_name = sources[0] if len(sources) == 1 else "request"
        return result

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError) -> BindingResult:
        return cls.from_errors(exc.errors(), object_name=exc.title, strip_source=False)

    def field_error_map(self) -> dict[str, str]:
        # Later messages for the same field win.
        return dict(self.field_errors)


def field_path(loc: Sequence[Any]) -> str:
    return ".".join(str(part) for part in loc)
