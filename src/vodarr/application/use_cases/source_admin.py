"""Administrative source management: single and batch source edits."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Literal

import structlog

from vodarr.domain.entities import (
    InvalidCallerInput,
    PermissionDenied,
    Source,
    VodarrError,
)
from vodarr.domain.ports import AuthorizationPort
from vodarr.infrastructure.sources.registry import SourceRegistry

log = structlog.get_logger(__name__)

BatchAction = Literal["enable", "disable", "delete"]


@dataclass(frozen=True)
class BatchItemResult:
    key: str
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class SourceDraft:
    """One entry of a ``batch_add`` request, not yet validated."""

    key: str | None
    name: str | None
    api: str | None
    detail: str | None = None
    is_adult: bool = False


def batch_summary(results: Sequence[BatchItemResult]) -> dict[str, int]:
    succeeded = sum(1 for r in results if r.success)
    return {
        "total": len(results),
        "success_count": succeeded,
        "failed_count": len(results) - succeeded,
    }


class SourceAdminUseCase:
    """Source administration guarded by the authorization port.

    Every method takes the caller name first and raises
    ``PermissionDenied`` unless the caller's role is authorized.
    """

    def __init__(self, registry: SourceRegistry, authorization: AuthorizationPort):
        self.registry = registry
        self.authorization = authorization

    async def authorize(self, caller: str | None) -> str:
        if not caller:
            raise PermissionDenied("missing caller")
        role = await self.authorization.role_of(caller)
        if not self.authorization.is_authorized(role):
            log.warning("admin_access_denied", caller=caller, role=role)
            raise PermissionDenied(caller)
        return caller

    async def list_sources(self, caller: str | None) -> list[Source]:
        await self.authorize(caller)
        return await self.registry.list_all()

    async def add(
        self,
        caller: str | None,
        *,
        key: str | None,
        name: str | None,
        api: str | None,
        detail: str | None = None,
        is_adult: bool = False,
    ) -> Source:
        await self.authorize(caller)
        if not key or not name or not api:
            raise InvalidCallerInput("key, name and api are required")
        return await self.registry.add(
            key, name, api, detail_page_url=detail, is_adult=is_adult
        )

    async def set_enabled(
        self, caller: str | None, key: str | None, enabled: bool
    ) -> Source:
        await self.authorize(caller)
        if not key:
            raise InvalidCallerInput("key is required")
        return await self.registry.set_enabled(key, enabled)

    async def delete(self, caller: str | None, key: str | None) -> None:
        await self.authorize(caller)
        if not key:
            raise InvalidCallerInput("key is required")
        await self.registry.delete(key)

    async def sort(
        self, caller: str | None, order: Sequence[str] | None
    ) -> list[Source]:
        await self.authorize(caller)
        if order is None:
            raise InvalidCallerInput("order must be a list of source keys")
        return await self.registry.reorder(order)

    async def batch(
        self, caller: str | None, action: BatchAction, keys: Sequence[str] | None
    ) -> list[BatchItemResult]:
        """Apply *action* to each key; one key's failure does not stop the rest."""
        await self.authorize(caller)
        if not keys:
            raise InvalidCallerInput("keys must be a non-empty list")

        operations: dict[str, Callable[[str], Awaitable[object]]] = {
            "enable": lambda k: self.registry.set_enabled(k, True),
            "disable": lambda k: self.registry.set_enabled(k, False),
            "delete": self.registry.delete,
        }
        operation = operations[action]

        results: list[BatchItemResult] = []
        for key in keys:
            results.append(await _apply(key, operation(key)))

        log.info("sources_batch_applied", action=action, **batch_summary(results))
        return results

    async def batch_add(
        self, caller: str | None, drafts: Sequence[SourceDraft] | None
    ) -> list[BatchItemResult]:
        """Register each draft; invalid or duplicate entries fail individually."""
        await self.authorize(caller)
        if not drafts:
            raise InvalidCallerInput("sources must be a non-empty list")

        results: list[BatchItemResult] = []
        for draft in drafts:
            if not draft.key or not draft.name or not draft.api:
                results.append(
                    BatchItemResult(
                        key=draft.key or "unknown",
                        success=False,
                        error="key, name and api are required",
                    )
                )
                continue
            added = self.registry.add(
                draft.key,
                draft.name,
                draft.api,
                detail_page_url=draft.detail,
                is_adult=draft.is_adult,
            )
            results.append(await _apply(draft.key, added))

        log.info("sources_batch_applied", action="add", **batch_summary(results))
        return results


async def _apply(key: str, operation: Awaitable[object]) -> BatchItemResult:
    try:
        await operation
    except VodarrError as e:
        return BatchItemResult(key=key, success=False, error=str(e))
    return BatchItemResult(key=key, success=True)
