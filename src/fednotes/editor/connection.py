"""Server connectivity monitor with exponential backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

CHECK_INTERVAL = 5.0
MAX_CHECK_INTERVAL = 30.0
CHECK_TIMEOUT = 3.0

Probe = Callable[[], Awaitable[bool]]


class ConnectionMonitor:
    """
    Polls the server and reports online/offline transitions.

    While offline the polling interval doubles on every failure, up to
    ``max_interval``; the first successful check resets it.
    """

    def __init__(
        self,
        probe: Probe,
        on_offline: Callable[[], None] | None = None,
        on_online: Callable[[], None] | None = None,
        interval: float = CHECK_INTERVAL,
        max_interval: float = MAX_CHECK_INTERVAL,
        timeout: float = CHECK_TIMEOUT,
    ):
        self.probe = probe
        self.on_offline = on_offline
        self.on_online = on_online
        self.interval = interval
        self.max_interval = max_interval
        self.timeout = timeout

        self.is_online = True
        self.check_in_progress = False
        self.current_interval = interval
        self.failure_count = 0
        self.running = False
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    def start(self) -> None:
        self.running = True
        self.schedule_next_check()

    def stop(self) -> None:
        self.running = False
        self._cancel_timer()

    async def close(self) -> None:
        """Stop polling and wait for a check already in progress."""
        self.stop()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def schedule_next_check(self) -> None:
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().call_later(
            self.current_interval, self._on_timer
        )

    async def check_connection(self) -> None:
        if self.check_in_progress:
            return
        self.check_in_progress = True
        try:
            try:
                ok = await asyncio.wait_for(self.probe(), timeout=self.timeout)
            except Exception as e:
                if self.is_online:
                    logger.warning("Connection to server lost: %s", e)
                elif self.failure_count % 6 == 0:
                    logger.info("Server still unavailable, retrying")
                ok = False

            if ok:
                self.handle_online()
            else:
                self.handle_offline()
        finally:
            self.check_in_progress = False
            if self.running:
                self.schedule_next_check()

    def handle_online(self) -> None:
        was_offline = not self.is_online
        self.is_online = True
        self.failure_count = 0
        self.current_interval = self.interval
        if was_offline:
            logger.info("Connection restored")
            if self.on_online:
                self.on_online()

    def handle_offline(self) -> None:
        was_online = self.is_online
        self.is_online = False
        self.failure_count += 1
        self.current_interval = min(
            self.interval * 2**self.failure_count, self.max_interval
        )
        if was_online and self.on_offline:
            self.on_offline()

    async def retry(self) -> None:
        await self.check_connection()

    def _cancel_timer(self) -> None:
        if self._timer:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        task = asyncio.ensure_future(self.check_connection())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
