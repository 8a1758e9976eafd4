"""Activity log endpoints."""

from __future__ import annotations

from typing import Literal, Optional, cast

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from woviex.domain.entities.admin import LogLevel
from woviex.interfaces.api.deps import require_admin
from woviex.interfaces.api.envelope import ok
from woviex.interfaces.app_state import AppState

router = APIRouter(
    prefix="/api/logs", tags=["logs"], dependencies=[Depends(require_admin)]
)


class LogCreate(BaseModel):
    level: Literal["INFO", "WARN", "ERROR", "DEBUG"] = "INFO"
    source: str = Field(min_length=1, max_length=64)
    message: str = Field(min_length=1)


@router.get("")
async def list_logs(
    request: Request,
    limit: int = Query(default=20, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    level: Optional[LogLevel] = Query(default=None),
) -> JSONResponse:
    """Newest entries first; ``total`` counts matches of the level filter."""
    state = cast(AppState, request.app.state)
    entries, total = await state.store.list_logs(limit, offset, level)
    return ok({"logs": [e.to_dict() for e in entries], "total": total})


@router.post("")
async def create_log(body: LogCreate, request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    entry = await state.activity_log.write(body.level, body.source, body.message)
    return ok(entry.to_dict())


@router.delete("")
async def clear_logs(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    await state.store.clear_logs()
    return ok(message="Logs cleared successfully")
