from __future__ import annotations

import logging
import os
import sys

import structlog


def _flush_logging() -> None:
    for handler in logging.getLogger().handlers:
        try:
            handler.flush()
        except Exception:
            pass
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except Exception:
            pass


def terminate_process(reason: str) -> None:
    """Exit immediately with status 0 so the supervisor starts a fresh process.

    In-flight requests are abandoned; nothing after this call runs.
    """

    structlog.get_logger("autorestart").warning("terminating_process", reason=reason, pid=os.getpid())
    _flush_logging()
    os._exit(0)
