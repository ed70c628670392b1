from __future__ import annotations

from typing import Callable

from fastapi import FastAPI

from autorestart.api.status import router as status_router
from autorestart.config import WatchdogConfig, get_settings
from autorestart.counter import RequestCounter
from autorestart.middleware import AutoRestartMiddleware
from autorestart.sampler import sample_current_process_memory
from autorestart.termination import terminate_process
from autorestart.watchdog import Sampler, Watchdog


def install_autorestart(
    app: FastAPI,
    settings: WatchdogConfig | None = None,
    *,
    sampler: Sampler = sample_current_process_memory,
    terminator: Callable[[str], None] = terminate_process,
) -> Watchdog:
    """Wrap ``app`` with the watchdog middleware and expose its status route."""

    watchdog = Watchdog(settings or get_settings(), counter=RequestCounter(), sampler=sampler)
    app.state.autorestart = watchdog
    app.add_middleware(AutoRestartMiddleware, watchdog=watchdog, terminator=terminator)
    app.include_router(status_router)
    return watchdog
