"""FastAPI dependencies shared by the admin routers."""

from __future__ import annotations

from typing import Optional, cast

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from woviex.domain.exceptions import Unauthorized
from woviex.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict[str, str]:
    """Require a valid admin bearer token. Raises 401 otherwise."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    state = cast(AppState, request.app.state)
    try:
        return state.admin_auth.verify_token(credentials.credentials)
    except Unauthorized as e:
        log.info("admin_token_rejected", reason=str(e), path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
