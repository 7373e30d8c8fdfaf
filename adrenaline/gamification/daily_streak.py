"""
Daily Streak Bonus
Consecutive calendar-day logins raise a session-wide multiplier.
"""
import logging
from datetime import date, timedelta
from typing import List

from adrenaline.gamification.base import format_multiplier
from adrenaline.gamification.models import (
    AdrenalineEvent,
    DailyBonusRecord,
    DailyStreakState,
    EffectTag,
    EventKind,
)

logger = logging.getLogger(__name__)

# (minimum consecutive days, multiplier), highest tier first
DAILY_TIERS = [
    (14, 2.0),
    (7, 1.5),
    (3, 1.2),
]


def daily_multiplier(days: int, cap: float = 2.0) -> float:
    for min_days, multiplier in DAILY_TIERS:
        if days >= min_days:
            return min(multiplier, cap)
    return 1.0


class DailyStreakBonus:

    name = "daily_streak"

    def __init__(self, state: DailyStreakState):
        self.state = state

    def is_active(self, now: int) -> bool:
        return self.state.current_multiplier > 1.0

    def current_multiplier(self, now: int) -> float:
        return self.state.current_multiplier

    def describe(self, now: int) -> str:
        return (
            f"Daily bonus {format_multiplier(self.state.current_multiplier)} "
            f"({self.state.consecutive_days} days in a row)"
        )

    def evaluate(self, today: date, now: int) -> List[AdrenalineEvent]:
        """
        Run the once-per-day login check.

        A last login dated after ``today`` (clock skew) counts as already
        evaluated today.
        """
        state = self.state
        last = state.last_login_date

        if last is not None and last >= today:
            return []

        if last == today - timedelta(days=1):
            state.consecutive_days += 1
        else:
            state.consecutive_days = 1

        old_multiplier = state.current_multiplier
        state.last_login_date = today
        state.current_multiplier = daily_multiplier(state.consecutive_days, state.max_multiplier)
        state.history.append(
            DailyBonusRecord(
                date=today,
                multiplier=state.current_multiplier,
                xp_earned=0,
                streak=state.consecutive_days,
            )
        )
        logger.info(
            f"Daily streak evaluated: {state.consecutive_days} days, "
            f"multiplier {state.current_multiplier}"
        )

        if state.current_multiplier > old_multiplier:
            return [
                AdrenalineEvent(
                    kind=EventKind.DAILY_BONUS_INCREASED,
                    value=state.consecutive_days,
                    multiplier=state.current_multiplier,
                    message=(
                        f"📅 {state.consecutive_days}-day streak! "
                        f"XP {format_multiplier(state.current_multiplier)} all day!"
                    ),
                    timestamp=now,
                    effects=[EffectTag.DAILY_FLAME],
                )
            ]
        return []

    def record_xp(self, today: date, amount: int) -> None:
        """Credit earned XP to today's history record, if today was evaluated"""
        history = self.state.history
        if history and history[-1].date == today:
            history[-1].xp_earned += amount
