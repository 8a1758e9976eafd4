"""Admin login endpoint."""

from __future__ import annotations

from typing import Optional, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from woviex.interfaces.api.envelope import fail, ok
from woviex.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    password: Optional[str] = None


@router.post("/login")
async def login(request: Request, body: Optional[LoginRequest] = None) -> JSONResponse:
    """Exchange the admin password for a bearer token."""
    state = cast(AppState, request.app.state)
    client = request.client.host if request.client else "unknown"

    if body is None or not body.password:
        return fail("Password is required", 400)

    if not state.admin_auth.check_password(body.password):
        await state.activity_log.warn("Auth", f"Failed admin login attempt from {client}")
        return fail("Invalid credentials", 401)

    token = state.admin_auth.issue_token()
    await state.activity_log.info("Auth", f"Admin logged in from {client}")
    return ok({"token": token})
