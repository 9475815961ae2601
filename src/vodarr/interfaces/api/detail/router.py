from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from vodarr.application.use_cases.detail import DetailUseCase
from vodarr.domain.entities import (
    DetailUnavailable,
    InvalidCallerInput,
    RegistryUnavailable,
    SourceNotFound,
)
from vodarr.interfaces.api.search.presenter import present_result
from vodarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["detail"])


@router.get("/detail")
async def detail(
    request: Request,
    source: str = Query("", description="Source key"),
    id: str = Query("", description="Item id within the source"),
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    uc = DetailUseCase(registry=state.registry, fetcher=state.fetcher)

    try:
        result = await uc.execute(source, id)
    except InvalidCallerInput as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except SourceNotFound:
        return JSONResponse(
            status_code=404, content={"error": f"unknown source: {source}"}
        )
    except (DetailUnavailable, RegistryUnavailable) as e:
        log.warning("detail_failed", source=source, item_id=id, error=str(e))
        return JSONResponse(status_code=502, content={"error": "upstream unavailable"})

    return JSONResponse(content=present_result(result))
