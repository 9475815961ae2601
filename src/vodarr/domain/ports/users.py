"""Ports towards the (external) user directory."""

from __future__ import annotations

from typing import Protocol


class UserPreferencePort(Protocol):
    async def get_filter_adult(self, caller: str | None) -> bool:
        """True when adult content should be filtered for *caller*.

        Anonymous callers and failed lookups default to True.
        """
        ...


class AuthorizationPort(Protocol):
    async def role_of(self, caller: str | None) -> str | None:
        """Role name of *caller*, or None when unknown."""
        ...

    def is_authorized(self, role: str | None) -> bool:
        """Verdict for administrative actions."""
        ...
