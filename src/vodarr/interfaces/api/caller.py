"""Caller identity extraction for API requests."""

from __future__ import annotations

from fastapi import Request


def caller_from_request(request: Request, user_name: str | None = None) -> str | None:
    """Caller name from ``Authorization: Bearer <name>``, else ``userName``."""
    auth = request.headers.get("authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    if user_name and user_name.strip():
        return user_name.strip()
    return None
