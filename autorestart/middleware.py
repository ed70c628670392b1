from __future__ import annotations

from typing import Any, Callable

from autorestart.termination import terminate_process
from autorestart.watchdog import Action, Watchdog


class AutoRestartMiddleware:
    """Counts handled HTTP requests and stops the process on a memory breach."""

    def __init__(
        self,
        app: Callable[..., Any],
        watchdog: Watchdog,
        terminator: Callable[[str], None] = terminate_process,
    ) -> None:
        self.app = app
        self.watchdog = watchdog
        self.terminator = terminator

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        finally:
            # Counted whether the downstream app succeeded or raised.
            count, action = self.watchdog.handle_request()
            if action is Action.TERMINATE:
                self.terminator(
                    f"virtual memory above {self.watchdog.config.max_memory_bytes} bytes "
                    f"after {count} requests"
                )
