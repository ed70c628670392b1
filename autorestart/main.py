"""Minimal host app wired through the watchdog.

Run it with the ``server`` extra installed, e.g.
``uvicorn autorestart.main:app`` or
``gunicorn -k uvicorn.workers.UvicornWorker autorestart.main:app`` so that a
worker which exits on a memory breach is replaced by the master.
"""

from fastapi import FastAPI

from autorestart.config import get_settings
from autorestart.install import install_autorestart
from autorestart.observability.logging import configure_logging


app = FastAPI(title="AutoRestart", version="0.1.0")
install_autorestart(app)


@app.on_event("startup")
def _startup() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
