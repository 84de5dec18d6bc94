from __future__ import annotations

from fastapi import Header, HTTPException

from automessaging.core.config import settings


def require_control_token(x_control_token: str | None = Header(default=None, alias="X-Control-Token")) -> None:
    if not settings.CONTROL_TOKEN:
        return
    if not x_control_token or x_control_token != settings.CONTROL_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid control token")
