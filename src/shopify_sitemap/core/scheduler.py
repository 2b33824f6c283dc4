from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from shopify_sitemap.observability.diagnostics import NULL_SINK

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from shopify_sitemap.observability.diagnostics import DiagnosticSink


class UpdateScheduler:
    """Run ``job`` every ``interval_seconds`` until shut down.

    ``interval_seconds`` may be a callable; it is then asked for the wait
    before every cycle, so a reloaded frequency takes effect on the next
    cycle. With ``run_immediately`` the first run happens right after
    ``start`` instead of one interval later.
    """

    def __init__(
        self,
        interval_seconds: float | Callable[[], float],
        job: Callable[[], Awaitable[object]],
        *,
        run_immediately: bool = False,
        sink: DiagnosticSink = NULL_SINK,
    ) -> None:
        if not callable(interval_seconds):
            _check_interval(interval_seconds)
        if not callable(job):
            msg = "job must be callable"
            raise TypeError(msg)

        self._interval_seconds = interval_seconds
        self._job = job
        self._run_immediately = run_immediately
        self._sink = sink
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run())

    async def shutdown(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        if self._run_immediately:
            await self._job()
        while not self._stop_event.is_set():
            if await self._wait_for_stop():
                break
            await self._job()
        self._sink.info("scheduler_stopped")

    def _next_interval(self) -> float:
        if callable(self._interval_seconds):
            return _check_interval(self._interval_seconds())
        return self._interval_seconds

    async def _wait_for_stop(self) -> bool:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self._next_interval())
        except TimeoutError:
            return False
        return True


def _check_interval(interval_seconds: float) -> float:
    if interval_seconds <= 0:
        msg = "interval_seconds must be positive"
        raise ValueError(msg)
    return interval_seconds
