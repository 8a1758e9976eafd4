"""Origin whitelist management."""

from __future__ import annotations

from typing import Optional, cast

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from woviex.domain.exceptions import RecordNotFound
from woviex.interfaces.api.deps import require_admin
from woviex.interfaces.api.envelope import fail, ok
from woviex.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/domains", tags=["domains"])


class DomainCreate(BaseModel):
    domain: Optional[str] = None


@router.get("")
async def list_domains(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    return ok([d.to_dict() for d in await state.store.list_domains()])


@router.post("", dependencies=[Depends(require_admin)])
async def add_domain(body: DomainCreate, request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        record = await state.store.add_domain(body.domain or "")
    except ValueError as e:
        return fail(str(e), 400)
    await state.activity_log.info("Security", f"Domain {record.domain} added via API")
    return ok(record.to_dict())


@router.put("/{domain_id}", dependencies=[Depends(require_admin)])
async def toggle_domain(domain_id: int, request: Request) -> JSONResponse:
    """Flip a domain between active and inactive."""
    state = cast(AppState, request.app.state)
    try:
        record = await state.store.toggle_domain(domain_id)
    except RecordNotFound:
        return fail("Domain not found", 404)
    await state.activity_log.info(
        "Security", f"Domain {record.domain} status toggled via API"
    )
    return ok(record.to_dict())


@router.delete("/{domain_id}", dependencies=[Depends(require_admin)])
async def delete_domain(domain_id: int, request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        await state.store.delete_domain(domain_id)
    except RecordNotFound:
        return fail("Domain not found", 404)
    await state.activity_log.info("Security", f"Domain {domain_id} deleted via API")
    return ok(message="Domain deleted successfully")
