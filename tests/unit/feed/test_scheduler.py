"""Unit tests for feed.scheduler module."""

import asyncio
from unittest.mock import MagicMock

import pytest

from flowgazer.feed.scheduler import RenderScheduler


# =============================================================================
# Synchronous behaviour
# =============================================================================


class TestRenderNow:
    def test_invokes_refresh(self):
        refresh = MagicMock()
        RenderScheduler(refresh).render_now()
        refresh.assert_called_once_with()

    def test_without_callback(self):
        RenderScheduler().render_now()

    def test_set_refresh(self):
        refresh = MagicMock()
        scheduler = RenderScheduler()
        scheduler.set_refresh(refresh)
        scheduler.render_now()
        refresh.assert_called_once()

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            RenderScheduler(delay=-0.1)

    def test_disabled_schedule_is_noop_without_loop(self):
        scheduler = RenderScheduler(MagicMock(), auto_update=False)
        scheduler.schedule_render()
        assert not scheduler.pending

    def test_schedule_without_loop_renders_immediately(self):
        refresh = MagicMock()
        scheduler = RenderScheduler(refresh)
        scheduler.schedule_render()
        refresh.assert_called_once_with()
        assert not scheduler.pending


# =============================================================================
# Debounce on the event loop
# =============================================================================


class TestScheduleRender:
    @pytest.mark.asyncio
    async def test_fires_after_delay(self):
        refresh = MagicMock()
        scheduler = RenderScheduler(refresh, delay=0.01)
        scheduler.schedule_render()
        assert scheduler.pending
        refresh.assert_not_called()
        await asyncio.sleep(0.05)
        refresh.assert_called_once()
        assert not scheduler.pending

    @pytest.mark.asyncio
    async def test_burst_coalesced(self):
        refresh = MagicMock()
        scheduler = RenderScheduler(refresh, delay=0.02)
        for _ in range(10):
            scheduler.schedule_render()
        await asyncio.sleep(0.08)
        refresh.assert_called_once()

    @pytest.mark.asyncio
    async def test_render_now_cancels_pending(self):
        refresh = MagicMock()
        scheduler = RenderScheduler(refresh, delay=0.02)
        scheduler.schedule_render()
        scheduler.render_now()
        await asyncio.sleep(0.06)
        refresh.assert_called_once()

    @pytest.mark.asyncio
    async def test_cancel(self):
        refresh = MagicMock()
        scheduler = RenderScheduler(refresh, delay=0.01)
        scheduler.schedule_render()
        scheduler.cancel()
        await asyncio.sleep(0.04)
        refresh.assert_not_called()

    @pytest.mark.asyncio
    async def test_disabling_auto_update_drops_pending(self):
        refresh = MagicMock()
        scheduler = RenderScheduler(refresh, delay=0.01)
        scheduler.schedule_render()
        scheduler.set_auto_update(False)
        scheduler.schedule_render()
        await asyncio.sleep(0.04)
        refresh.assert_not_called()
        assert scheduler.auto_update is False

    @pytest.mark.asyncio
    async def test_explicit_loop(self):
        refresh = MagicMock()
        scheduler = RenderScheduler(refresh, delay=0.0, loop=asyncio.get_running_loop())
        scheduler.schedule_render()
        await asyncio.sleep(0.01)
        refresh.assert_called_once()
