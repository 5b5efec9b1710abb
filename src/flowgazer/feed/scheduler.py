"""
Debounced render scheduling on the asyncio event loop.

Bursts of arrivals (a backlog replay, a busy relay) should produce one
repaint, not one per event. [RenderScheduler][flowgazer.feed.scheduler.RenderScheduler]
keeps at most one pending ``loop.call_later`` handle; every new request
cancels it and arms a fresh one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from flowgazer.core.logger import Logger
from flowgazer.core.metrics import RENDERS


RefreshCallback = Callable[[], None]


class RenderScheduler:
    """Coalesce repaint requests into one delayed ``refresh`` call.

    Args:
        refresh: Renderer callback; may be set later with
            [set_refresh()][flowgazer.feed.scheduler.RenderScheduler.set_refresh].
        delay: Debounce delay in seconds.
        auto_update: When False, ``schedule_render`` is a no-op.
        loop: Loop to arm timers on. Defaults to the running loop at the
            time of each ``schedule_render`` call.

    Note:
        ``schedule_render`` must run on the loop's thread. Called with no
        loop at all it degrades to an immediate render.
    """

    def __init__(
        self,
        refresh: RefreshCallback | None = None,
        *,
        delay: float = 0.3,
        auto_update: bool = True,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self._refresh = refresh
        self._delay = delay
        self._auto_update = auto_update
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._logger = Logger("flowgazer.scheduler")

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def auto_update(self) -> bool:
        return self._auto_update

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def set_refresh(self, refresh: RefreshCallback | None) -> None:
        self._refresh = refresh

    def set_auto_update(self, enabled: bool) -> None:
        """Toggle live repaints; disabling drops any pending one."""
        self._auto_update = enabled
        if not enabled:
            self.cancel()

    def schedule_render(self) -> None:
        """Arm (or re-arm) the debounce timer.

        Without an explicit loop and outside a running one there is nothing
        to debounce on, so the refresh runs synchronously instead.
        """
        if not self._auto_update:
            return
        self.cancel()
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                self._invoke("immediate")
                return
        self._handle = loop.call_later(self._delay, self._fire)

    def render_now(self) -> None:
        """Cancel any pending timer and refresh synchronously."""
        self.cancel()
        self._invoke("immediate")

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._invoke("debounced")

    def _invoke(self, trigger: str) -> None:
        if self._refresh is None:
            return
        RENDERS.labels(trigger=trigger).inc()
        self._logger.debug("render", trigger=trigger)
        self._refresh()
