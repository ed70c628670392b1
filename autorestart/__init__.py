"""Restart a server process once its memory grows past a ceiling.

Counts handled requests and, every ``check_interval`` requests after a warm-up
period, samples the process's virtual memory size. On a breach the process
exits so the supervisor (gunicorn, systemd, ...) can start a fresh one.
"""

from autorestart.config import WatchdogConfig, get_settings
from autorestart.counter import RequestCounter
from autorestart.install import install_autorestart
from autorestart.middleware import AutoRestartMiddleware
from autorestart.sampler import MemorySample, sample_current_process_memory
from autorestart.watchdog import Action, Watchdog, WatchdogState, on_request_handled

__all__ = [
    "Action",
    "AutoRestartMiddleware",
    "MemorySample",
    "RequestCounter",
    "Watchdog",
    "WatchdogConfig",
    "WatchdogState",
    "get_settings",
    "install_autorestart",
    "on_request_handled",
    "sample_current_process_memory",
]
