"""
Combo Tracker
Consecutive correct answers build a tiered multiplier; a miss or a pause
longer than the timeout drops it.
"""
import logging
from typing import List

from adrenaline.core.clock import elapsed_ms
from adrenaline.gamification.base import format_multiplier
from adrenaline.gamification.models import (
    AdrenalineEvent,
    ComboState,
    EffectTag,
    EventKind,
)

logger = logging.getLogger(__name__)

# (minimum streak, multiplier), highest tier first
COMBO_TIERS = [
    (10, 2.0),
    (7, 1.8),
    (5, 1.5),
    (3, 1.2),
]

MIN_COMBO_STREAK = 3


def combo_multiplier(streak: int) -> float:
    for min_streak, multiplier in COMBO_TIERS:
        if streak >= min_streak:
            return multiplier
    return 1.0


class ComboTracker:
    """Streak counter with timeout decay"""

    name = "combo"

    def __init__(self, state: ComboState):
        self.state = state

    def is_active(self, now: int) -> bool:
        return self.state.multiplier > 1.0

    def current_multiplier(self, now: int) -> float:
        return self.state.multiplier

    def describe(self, now: int) -> str:
        return f"Combo {format_multiplier(self.state.multiplier)} ({self.state.current_streak} in a row)"

    def on_correct(self, now: int) -> List[AdrenalineEvent]:
        state = self.state
        elapsed = elapsed_ms(now, state.last_success_time)

        if elapsed is not None and elapsed < state.timeout_ms:
            state.current_streak += 1
        else:
            state.current_streak = 1

        state.last_success_time = now
        state.best_streak = max(state.best_streak, state.current_streak)

        old_multiplier = state.multiplier
        state.multiplier = combo_multiplier(state.current_streak)

        if state.current_streak >= MIN_COMBO_STREAK and state.multiplier != old_multiplier:
            return [
                AdrenalineEvent(
                    kind=EventKind.COMBO_START,
                    value=state.current_streak,
                    multiplier=state.multiplier,
                    message=f"🔥 {state.current_streak} combo! XP {format_multiplier(state.multiplier)}!",
                    timestamp=now,
                    effects=[EffectTag.COMBO_MULTIPLIER, EffectTag.VISUAL_FIRE],
                )
            ]
        return []

    def on_incorrect(self, now: int) -> List[AdrenalineEvent]:
        state = self.state
        events = []

        if state.current_streak > 0:
            events.append(
                AdrenalineEvent(
                    kind=EventKind.COMBO_BREAK,
                    value=state.current_streak,
                    multiplier=1.0,
                    message=f"💔 {state.current_streak} combo lost...",
                    timestamp=now,
                    effects=[EffectTag.COMBO_BREAK_EFFECT, EffectTag.SCREEN_FADE],
                )
            )

        state.current_streak = 0
        state.multiplier = 1.0
        return events

    def expire_if_idle(self, now: int) -> bool:
        """Drop the streak once the timeout has been observed. Returns True on drop."""
        state = self.state
        if state.current_streak == 0:
            return False

        elapsed = elapsed_ms(now, state.last_success_time)
        if elapsed is None or elapsed >= state.timeout_ms:
            logger.debug(f"Combo of {state.current_streak} timed out")
            state.current_streak = 0
            state.multiplier = 1.0
            return True
        return False

    def time_left_ms(self, now: int) -> int:
        elapsed = elapsed_ms(now, self.state.last_success_time)
        if elapsed is None or self.state.current_streak == 0:
            return 0
        return max(0, self.state.timeout_ms - elapsed)
