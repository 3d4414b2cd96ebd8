"""Tests for bounded-concurrency fan-out."""

from __future__ import annotations

import asyncio

import pytest

from steadfast_mcp.core.concurrency import ConcurrencyLimiter, gather_limited


class TestConcurrencyLimiter:
    """Tests for ConcurrencyLimiter."""

    def test_rejects_zero_slots(self):
        with pytest.raises(ValueError):
            ConcurrencyLimiter(max_concurrent=0)

    @pytest.mark.asyncio
    async def test_never_exceeds_limit(self):
        limiter = ConcurrencyLimiter(max_concurrent=2)
        peak = {"value": 0}

        async def work(i):
            peak["value"] = max(peak["value"], limiter.active_count)
            await asyncio.sleep(0.01)
            return i * 2

        result = await limiter.gather([work(i) for i in range(6)])
        assert result.results == [0, 2, 4, 6, 8, 10]
        assert result.all_succeeded
        assert peak["value"] <= 2
        assert limiter.active_count == 0

    @pytest.mark.asyncio
    async def test_failures_are_captured_per_item(self):
        async def ok():
            return "fine"

        async def boom():
            raise RuntimeError("boom")

        result = await ConcurrencyLimiter(max_concurrent=2).gather([ok(), boom(), ok()])
        assert result.results == ["fine", None, "fine"]
        assert isinstance(result.errors[1], RuntimeError)
        assert result.stats.failed == 1
        assert result.stats.succeeded == 2
        assert result.all_succeeded is False

    @pytest.mark.asyncio
    async def test_timeouts_are_counted(self):
        async def slow():
            await asyncio.sleep(5)

        result = await ConcurrencyLimiter(max_concurrent=1).gather([slow()], timeout=0.01)
        assert result.stats.timed_out == 1
        assert isinstance(result.errors[0], asyncio.TimeoutError)

    @pytest.mark.asyncio
    async def test_zero_timeout_is_a_limit(self):
        async def slow():
            await asyncio.sleep(5)

        result = await ConcurrencyLimiter(max_concurrent=1).gather([slow()], timeout=0)
        assert result.stats.timed_out == 1


class TestGatherLimited:
    """Tests for the one-shot helper."""

    @pytest.mark.asyncio
    async def test_preserves_order(self):
        async def delayed(value, delay):
            await asyncio.sleep(delay)
            return value

        result = await gather_limited([delayed("a", 0.03), delayed("b", 0.0)], max_concurrent=2)
        assert result.results == ["a", "b"]

    @pytest.mark.asyncio
    async def test_empty(self):
        result = await gather_limited([])
        assert result.results == []
        assert result.stats.total == 0
