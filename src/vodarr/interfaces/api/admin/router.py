"""Source administration endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import Literal, Optional, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from vodarr.application.use_cases.source_admin import (
    BatchAction,
    BatchItemResult,
    SourceAdminUseCase,
    SourceDraft,
    batch_summary,
)
from vodarr.domain.entities import (
    DuplicateSource,
    InvalidCallerInput,
    PermissionDenied,
    RegistryUnavailable,
    SourceNotFound,
)
from vodarr.interfaces.api.caller import caller_from_request
from vodarr.interfaces.api.search.presenter import present_source
from vodarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

SourceAction = Literal[
    "add",
    "enable",
    "disable",
    "delete",
    "sort",
    "batch_add",
    "batch_enable",
    "batch_disable",
    "batch_delete",
]


class SourceDraftBody(BaseModel):
    key: Optional[str] = None
    name: Optional[str] = None
    api: Optional[str] = None
    detail: Optional[str] = None
    is_adult: bool = False


class SourceActionBody(BaseModel):
    action: SourceAction
    key: Optional[str] = None
    name: Optional[str] = None
    api: Optional[str] = None
    detail: Optional[str] = None
    is_adult: bool = False
    keys: Optional[list[str]] = None
    order: Optional[list[str]] = None
    sources: Optional[list[SourceDraftBody]] = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _batch_response(results: list[BatchItemResult]) -> JSONResponse:
    return JSONResponse(
        content={
            "ok": True,
            "results": [asdict(r) for r in results],
            **batch_summary(results),
        }
    )


def _use_case(state: AppState) -> SourceAdminUseCase:
    return SourceAdminUseCase(registry=state.registry, authorization=state.users)


@router.get("/sources")
async def list_sources(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    caller = caller_from_request(request)

    try:
        sources = await _use_case(state).list_sources(caller)
    except PermissionDenied:
        return _error(401, "unauthorized")
    except RegistryUnavailable:
        return _error(503, "source registry unavailable")

    return JSONResponse(
        content={"sources": [present_source(s) for s in sources]},
        headers={"Cache-Control": "no-store"},
    )


@router.post("/sources")
async def manage_sources(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    caller = caller_from_request(request)
    uc = _use_case(state)

    try:
        await uc.authorize(caller)
    except PermissionDenied:
        return _error(401, "unauthorized")

    try:
        body = SourceActionBody.model_validate(await request.json())
    except (ValueError, ValidationError):
        return _error(400, "invalid payload")

    try:
        if body.action == "add":
            await uc.add(
                caller,
                key=body.key,
                name=body.name,
                api=body.api,
                detail=body.detail,
                is_adult=body.is_adult,
            )
        elif body.action in ("enable", "disable"):
            await uc.set_enabled(caller, body.key, body.action == "enable")
        elif body.action == "delete":
            await uc.delete(caller, body.key)
        elif body.action == "sort":
            await uc.sort(caller, body.order)
        elif body.action == "batch_add":
            drafts = [SourceDraft(**s.model_dump()) for s in body.sources or []]
            return _batch_response(await uc.batch_add(caller, drafts))
        else:
            batch_action = cast(BatchAction, body.action.removeprefix("batch_"))
            return _batch_response(await uc.batch(caller, batch_action, body.keys))
    except InvalidCallerInput as e:
        return _error(400, str(e))
    except DuplicateSource as e:
        return _error(400, f"source already exists: {e}")
    except SourceNotFound as e:
        return _error(404, f"unknown source: {e}")
    except RegistryUnavailable:
        return _error(503, "source registry unavailable")

    log.info("admin_source_action", caller=caller, action=body.action, key=body.key)
    return JSONResponse(content={"ok": True})
