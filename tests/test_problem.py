from __future__ import annotations

from datetime import datetime, timezone
from types import MappingProxyType

from problem_handling.problem import PROBLEM_MEDIA_TYPE, ProblemDetail, default_title


def test_default_title_uses_reason_phrase() -> None:
    assert default_title(409) == "Conflict"
    assert default_title(422) == "Unprocessable Entity"
    assert default_title(599) == "Error"


def test_to_dict_flattens_extensions_and_encodes_values() -> None:
    problem = ProblemDetail.for_status_and_detail(409, "probe failed")
    problem.type = "https://api.test/errors/probe-error"
    problem.set_property("fieldErrors", MappingProxyType({"email": "bad"}))
    problem.set_property("globalErrors", ("one",))
    problem.set_property("at", datetime(2026, 1, 2, tzinfo=timezone.utc))

    assert problem.to_dict() == {
        "type": "https://api.test/errors/probe-error",
        "title": "Conflict",
        "status": 409,
        "detail": "probe failed",
        "fieldErrors": {"email": "bad"},
        "globalErrors": ["one"],
        "at": "2026-01-02T00:00:00+00:00",
    }


def test_explicit_title_and_default_type() -> None:
    problem = ProblemDetail(status=422, detail="nope", title="Validation Failed")
    payload = problem.to_dict()
    assert payload["title"] == "Validation Failed"
    assert payload["type"] == "about:blank"


def test_to_response_uses_problem_media_type() -> None:
    response = ProblemDetail.for_status_and_detail(404, "missing").to_response()

    assert response.status_code == 404
    assert response.media_type == PROBLEM_MEDIA_TYPE
    assert b'"detail":"missing"' in response.body


def test_to_dict_falls_back_to_string_for_unencodable_values() -> None:
    problem = ProblemDetail.for_status_and_detail(400, "bad")
    marker = object()
    problem.set_property("marker", marker)
    problem.set_property("count", 2)

    payload = problem.to_dict()
    assert payload["marker"] == str(marker)
    assert payload["count"] == 2
