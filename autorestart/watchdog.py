from __future__ import annotations

from enum import Enum
from threading import Lock
from typing import Any, Callable

import structlog

from autorestart.config import WatchdogConfig
from autorestart.counter import RequestCounter
from autorestart.sampler import MemorySample, sample_current_process_memory


Sampler = Callable[[], MemorySample | None]


class Action(str, Enum):
    NONE = "none"
    TERMINATE = "terminate"


class WatchdogState(str, Enum):
    DISABLED = "disabled"
    WARMING_UP = "warming_up"
    MONITORING = "monitoring"
    TERMINATING = "terminating"


def is_check_tick(config: WatchdogConfig, count: int) -> bool:
    """True when ``count`` is past warm-up and an exact multiple of the interval.

    A count that is skipped (or an interval changed between restarts) misses
    the tick rather than delaying it; the next multiple is checked instead.
    """

    if not config.active or not config.check_interval:
        return False
    if count <= config.min_handled_requests:
        return False
    return count % config.check_interval == 0


def _log_sample(count: int, sample: MemorySample) -> None:
    # Diagnostics must never get in the way of the decision.
    try:
        structlog.get_logger("autorestart").warning(
            "process_info",
            request_count=count,
            pid=sample.pid,
            virtual_bytes=sample.virtual_bytes,
            resident_bytes=sample.resident_bytes,
            command_line=sample.command_line,
            table=sample.as_table(),
        )
    except Exception:
        pass


def _take_sample(sampler: Sampler, count: int) -> MemorySample | None:
    try:
        sample = sampler()
    except Exception:
        structlog.get_logger("autorestart").exception("memory_sample_failed", request_count=count)
        return None

    if sample is None:
        structlog.get_logger("autorestart").info("memory_sample_missing", request_count=count)
        return None

    _log_sample(count, sample)
    return sample


def on_request_handled(
    config: WatchdogConfig,
    count: int,
    sampler: Sampler = sample_current_process_memory,
) -> Action:
    """Decide what to do after the ``count``-th request has been handled."""

    if not is_check_tick(config, count):
        return Action.NONE

    structlog.get_logger("autorestart").debug("memory_check", request_count=count)
    sample = _take_sample(sampler, count)
    if sample is None:
        return Action.NONE

    if sample.virtual_bytes > config.max_memory_bytes:
        structlog.get_logger("autorestart").warning(
            "memory_limit_exceeded",
            request_count=count,
            virtual_bytes=sample.virtual_bytes,
            max_memory_bytes=config.max_memory_bytes,
        )
        return Action.TERMINATE
    return Action.NONE


class Watchdog:
    """Binds a config, a request counter and a sampler for one process."""

    def __init__(
        self,
        config: WatchdogConfig,
        counter: RequestCounter | None = None,
        sampler: Sampler = sample_current_process_memory,
    ) -> None:
        self.config = config
        self.counter = counter if counter is not None else RequestCounter()
        self._sampler = sampler
        self._lock = Lock()
        self._last_sample: MemorySample | None = None
        self._last_checked_at: int | None = None
        self._terminating = False

    def _recording_sampler(self, count: int) -> Sampler:
        def sample() -> MemorySample | None:
            result = self._sampler()
            with self._lock:
                self._last_sample = result
                self._last_checked_at = count
            return result

        return sample

    def on_request_handled(self, count: int) -> Action:
        action = on_request_handled(self.config, count, sampler=self._recording_sampler(count))
        if action is Action.TERMINATE:
            with self._lock:
                self._terminating = True
        return action

    def handle_request(self) -> tuple[int, Action]:
        """Count one handled request and decide on it.

        Returns the count this request was given along with the decision.
        """

        count = self.counter.increment()
        return count, self.on_request_handled(count)

    def state(self, count: int | None = None) -> WatchdogState:
        if not self.config.active:
            return WatchdogState.DISABLED
        with self._lock:
            if self._terminating:
                return WatchdogState.TERMINATING
        if count is None:
            count = self.counter.current()
        if count <= self.config.min_handled_requests:
            return WatchdogState.WARMING_UP
        return WatchdogState.MONITORING

    def snapshot(self) -> dict[str, Any]:
        count = self.counter.current()
        with self._lock:
            last_sample = self._last_sample
            last_checked_at = self._last_checked_at
        return {
            "state": self.state(count).value,
            "request_count": count,
            "config": {
                "active": self.config.active,
                "check_interval": self.config.check_interval,
                "min_handled_requests": self.config.min_handled_requests,
                "max_memory_bytes": self.config.max_memory_bytes,
            },
            "last_checked_at": last_checked_at,
            "last_sample": None
            if last_sample is None
            else {
                "pid": last_sample.pid,
                "virtual_bytes": last_sample.virtual_bytes,
                "resident_bytes": last_sample.resident_bytes,
                "command_line": last_sample.command_line,
            },
        }
