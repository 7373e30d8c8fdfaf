"""
Unit tests for the combo tracker

Tests cover:
- Tiered multiplier table
- Streak growth and timeout reset
- combo_start / combo_break events
- Lazy timeout observation
"""
import pytest

from adrenaline.gamification.combo import ComboTracker, combo_multiplier
from adrenaline.gamification.models import ComboState, EventKind

from fakes import START_MS


@pytest.fixture
def tracker():
    return ComboTracker(ComboState())


def answer_streak(tracker, count, start=START_MS, gap=1_000):
    events = []
    now = start
    for _ in range(count):
        now += gap
        events.extend(tracker.on_correct(now))
    return events, now


class TestComboMultiplier:
    """Tests for the tier table"""

    def test_tier_values(self):
        assert combo_multiplier(0) == 1.0
        assert combo_multiplier(2) == 1.0
        assert combo_multiplier(3) == 1.2
        assert combo_multiplier(4) == 1.2
        assert combo_multiplier(5) == 1.5
        assert combo_multiplier(7) == 1.8
        assert combo_multiplier(9) == 1.8
        assert combo_multiplier(10) == 2.0
        assert combo_multiplier(250) == 2.0

    def test_monotonic_and_only_defined_tiers(self):
        values = [combo_multiplier(s) for s in range(0, 60)]

        assert all(a <= b for a, b in zip(values, values[1:]))
        assert set(values) == {1.0, 1.2, 1.5, 1.8, 2.0}


class TestComboTracker:
    """Tests for streak transitions"""

    def test_streak_grows_within_timeout(self, tracker):
        answer_streak(tracker, 4)

        assert tracker.state.current_streak == 4
        assert tracker.state.best_streak == 4
        assert tracker.state.multiplier == 1.2

    def test_timeout_restarts_streak(self, tracker):
        _, now = answer_streak(tracker, 4)

        tracker.on_correct(now + 10_000)

        assert tracker.state.current_streak == 1
        assert tracker.state.multiplier == 1.0
        assert tracker.state.best_streak == 4

    def test_just_under_timeout_continues(self, tracker):
        _, now = answer_streak(tracker, 2)

        tracker.on_correct(now + 9_999)

        assert tracker.state.current_streak == 3

    def test_combo_start_only_on_tier_change(self, tracker):
        events, _ = answer_streak(tracker, 10)

        starts = [e for e in events if e.kind == EventKind.COMBO_START]
        assert [int(e.value) for e in starts] == [3, 5, 7, 10]
        assert [e.multiplier for e in starts] == [1.2, 1.5, 1.8, 2.0]

    def test_incorrect_breaks_combo(self, tracker):
        _, now = answer_streak(tracker, 6)

        events = tracker.on_incorrect(now + 500)

        assert len(events) == 1
        assert events[0].kind == EventKind.COMBO_BREAK
        assert events[0].value == 6
        assert tracker.state.current_streak == 0
        assert tracker.state.multiplier == 1.0

    def test_incorrect_without_streak_is_silent(self, tracker):
        assert tracker.on_incorrect(START_MS) == []
        assert tracker.state.current_streak == 0
        assert tracker.state.multiplier == 1.0

    def test_expire_if_idle(self, tracker):
        _, now = answer_streak(tracker, 5)

        assert tracker.expire_if_idle(now + 9_000) is False
        assert tracker.time_left_ms(now + 9_000) == 1_000

        assert tracker.expire_if_idle(now + 10_000) is True
        assert tracker.state.current_streak == 0
        assert tracker.state.multiplier == 1.0
        assert tracker.time_left_ms(now + 10_000) == 0

    def test_clock_skew_counts_as_no_elapsed_time(self, tracker):
        _, now = answer_streak(tracker, 2)

        tracker.on_correct(now - 60_000)

        assert tracker.state.current_streak == 3
        assert tracker.expire_if_idle(now - 120_000) is False

    def test_first_answer_starts_at_one(self, tracker):
        tracker.on_correct(START_MS)

        assert tracker.state.current_streak == 1
        assert tracker.is_active(START_MS) is False
