"""User directory backed by the ``users`` config section."""

from __future__ import annotations

from collections.abc import Mapping

from vodarr.infrastructure.config.schema import UserEntry

AUTHORIZED_ROLES = frozenset({"admin", "owner"})


class ConfigUserDirectory:
    """Answers preference and authorization questions for known callers.

    Unknown and anonymous callers filter adult content and have no role.
    """

    def __init__(self, users: Mapping[str, UserEntry]) -> None:
        self._users = dict(users)

    async def get_filter_adult(self, caller: str | None) -> bool:
        if not caller:
            return True
        entry = self._users.get(caller)
        return True if entry is None else entry.filter_adult_content

    async def role_of(self, caller: str | None) -> str | None:
        if not caller:
            return None
        entry = self._users.get(caller)
        return entry.role if entry is not None else None

    def is_authorized(self, role: str | None) -> bool:
        return role in AUTHORIZED_ROLES
