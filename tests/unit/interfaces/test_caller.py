"""Tests for caller_from_request."""

from __future__ import annotations

import pytest
from starlette.requests import Request

from vodarr.interfaces.api.caller import caller_from_request


def _request(headers: dict[str, str] | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestCallerFromRequest:
    def test_bearer_token(self) -> None:
        req = _request({"Authorization": "Bearer alice"})
        assert caller_from_request(req) == "alice"

    def test_bearer_scheme_case_insensitive(self) -> None:
        req = _request({"Authorization": "bearer  alice "})
        assert caller_from_request(req) == "alice"

    def test_bearer_wins_over_user_name(self) -> None:
        req = _request({"Authorization": "Bearer alice"})
        assert caller_from_request(req, "bob") == "alice"

    def test_user_name_fallback(self) -> None:
        assert caller_from_request(_request(), " bob ") == "bob"

    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer "}],
    )
    def test_anonymous(self, headers: dict[str, str]) -> None:
        assert caller_from_request(_request(headers)) is None

    def test_blank_user_name_is_anonymous(self) -> None:
        assert caller_from_request(_request(), "   ") is None
