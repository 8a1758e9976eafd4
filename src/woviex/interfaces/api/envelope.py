"""JSON response envelope: ``{success, data}`` / ``{success: false, error}``."""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse


def ok(
    data: Any = None,
    *,
    message: str | None = None,
    status_code: int = 200,
) -> JSONResponse:
    content: dict[str, Any] = {"success": True}
    if data is not None:
        content["data"] = data
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def fail(error: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": error}
    )
