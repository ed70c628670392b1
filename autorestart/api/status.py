from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from autorestart.watchdog import Watchdog


router = APIRouter(prefix="/autorestart", tags=["autorestart"])


@router.get("/status")
async def status(request: Request) -> dict:
    watchdog: Watchdog | None = getattr(request.app.state, "autorestart", None)
    if watchdog is None or not watchdog.config.enable_status_endpoint:
        raise HTTPException(status_code=404, detail="Not found")
    return watchdog.snapshot()
