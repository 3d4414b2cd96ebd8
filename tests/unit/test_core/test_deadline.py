"""Tests for Deadline time budgets."""

from __future__ import annotations

from steadfast_mcp.core.deadline import Deadline


class StepClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestDeadline:
    """Tests for remaining time and timeout capping."""

    def test_remaining_counts_down(self):
        clock = StepClock()
        deadline = Deadline.after(10.0, clock=clock)
        assert deadline.remaining() == 10.0
        clock.now += 4.0
        assert deadline.remaining() == 6.0
        assert deadline.expired is False

    def test_remaining_floors_at_zero(self):
        clock = StepClock()
        deadline = Deadline.after(1.0, clock=clock)
        clock.now += 5.0
        assert deadline.remaining() == 0.0
        assert deadline.expired is True

    def test_cap_takes_smaller(self):
        clock = StepClock()
        deadline = Deadline.after(5.0, clock=clock)
        assert deadline.cap(2.0) == 2.0
        assert deadline.cap(30.0) == 5.0
        assert deadline.cap(None) == 5.0

    def test_unbounded(self):
        deadline = Deadline.unbounded()
        assert deadline.remaining() is None
        assert deadline.expired is False
        assert deadline.cap(3.0) == 3.0
        assert deadline.cap(None) is None
        assert Deadline.after(None).expires_at is None

    def test_negative_budget_is_already_expired(self):
        deadline = Deadline.after(-5.0, clock=StepClock())
        assert deadline.expired is True
