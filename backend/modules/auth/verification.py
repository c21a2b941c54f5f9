"""
Verification polling.

Email verification happens outside the system (the user clicks a link), so
a session waiting in PENDING_VERIFICATION re-checks the flag on a fixed
interval. The poller is an explicit task with a cancellation handle: it
stops itself once verified, and cancel() stops the timer. A check that is
already running is allowed to finish. Failed checks that raise GoRidesError
are retried; any other error ends the loop and is logged.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from shared.exceptions import GoRidesError

logger = logging.getLogger(__name__)


class VerificationPoller:
    """Repeats an async verification check until it succeeds or is cancelled."""

    def __init__(
        self,
        check: Callable[[], Awaitable[bool]],
        interval: float = 5.0,
        on_verified: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        self._check = check
        self._interval = interval
        self._on_verified = on_verified
        self._task: Optional[asyncio.Task] = None
        self._cancelled = asyncio.Event()
        self.checks = 0
        self.verified = False
        self.error: Optional[BaseException] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the polling loop on the running event loop."""
        if self.running:
            return
        self._cancelled.clear()
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._task.add_done_callback(self._finished)

    def cancel(self) -> None:
        """Stop polling. Idempotent."""
        self._cancelled.set()

    async def wait(self) -> bool:
        """Wait for the loop to end; returns whether verification succeeded."""
        if self._task is not None:
            await self._task
        return self.verified

    def _finished(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.error = error
            logger.error("Verification polling stopped: %r", error, exc_info=error)

    async def _sleep(self) -> bool:
        """Wait one interval; returns False if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=self._interval)
        except asyncio.TimeoutError:
            return True
        return False

    async def _run(self) -> None:
        while await self._sleep():
            self.checks += 1
            try:
                verified = await self._check()
            except GoRidesError as e:
                logger.warning("Verification check failed: %s", e.message)
                continue

            if verified:
                self.verified = True
                logger.info("Email verified after %d checks", self.checks)
                if self._on_verified is not None:
                    await self._on_verified()
                return
