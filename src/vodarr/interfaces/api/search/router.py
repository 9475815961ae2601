from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request

from vodarr.application.use_cases.search import FederatedSearchUseCase, SearchRequest
from vodarr.domain.entities import InvalidCallerInput
from vodarr.interfaces.api.caller import caller_from_request
from vodarr.interfaces.app_state import AppState

from .presenter import present_group, present_result

log = structlog.get_logger(__name__)

router = APIRouter(tags=["search"])


def _use_case(state: AppState) -> FederatedSearchUseCase:
    return FederatedSearchUseCase(
        registry=state.registry,
        fetcher=state.fetcher,
        cache=state.search_cache,
        preferences=state.users,
        concurrency_limit=state.config.search.concurrency_limit,
    )


@router.get("/search")
async def search(
    request: Request,
    q: str | None = Query(None, description="Search query"),
    include_adult: bool | None = Query(
        None, description="Override the caller's adult-content preference"
    ),
    user_name: str | None = Query(None, alias="userName"),
) -> dict:
    state = cast(AppState, request.app.state)
    caller = caller_from_request(request, user_name)

    outcome = await _use_case(state).execute(
        SearchRequest(query=q or "", caller=caller, include_adult=include_adult)
    )
    return {
        "regular_results": [present_result(r) for r in outcome.results],
        # Adult items are filtered out or merged into regular_results
        "adult_results": [],
        "cached": outcome.cached,
        "search_time": outcome.elapsed_ms,
        "degraded": outcome.degraded,
    }


@router.get("/search/aggregate")
async def search_aggregate(
    request: Request,
    q: str | None = Query(None, description="Search query"),
    include_adult: bool | None = Query(None),
    user_name: str | None = Query(None, alias="userName"),
) -> dict:
    state = cast(AppState, request.app.state)
    caller = caller_from_request(request, user_name)

    try:
        outcome = await _use_case(state).execute_grouped(
            SearchRequest(query=q or "", caller=caller, include_adult=include_adult)
        )
    except InvalidCallerInput:
        return {"groups": []}

    return {
        "groups": [present_group(g) for g in outcome.groups],
        "cached": outcome.cached,
        "search_time": outcome.elapsed_ms,
        "degraded": outcome.degraded,
    }
