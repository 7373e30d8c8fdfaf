"""
Critical Event Generator
Per-answer probabilistic one-shot multiplier.

The rate is constant: run length is tracked for statistics only and never
feeds back into the trigger probability.
"""
import logging
import random
from typing import List, Optional

from adrenaline.gamification.base import format_multiplier
from adrenaline.gamification.models import (
    AdrenalineEvent,
    CriticalState,
    EffectTag,
    EventKind,
)

logger = logging.getLogger(__name__)


class CriticalEventGenerator:

    name = "critical"

    def __init__(self, state: CriticalState, rng: random.Random):
        self.state = state
        self.rng = rng

    def roll(self, now: int, forced: bool = False) -> List[AdrenalineEvent]:
        state = self.state
        if not (forced or self.rng.random() < state.base_rate):
            state.current_run_length = 0
            return []

        state.total_count += 1
        state.current_run_length += 1
        state.last_critical_time = now
        logger.debug(f"Critical hit (run of {state.current_run_length})")
        return [self.hit_event(now)]

    def reset_run(self) -> None:
        self.state.current_run_length = 0

    def hit_event(self, now: int, message: Optional[str] = None) -> AdrenalineEvent:
        multiplier = self.state.multiplier
        return AdrenalineEvent(
            kind=EventKind.CRITICAL_HIT,
            value=multiplier,
            multiplier=multiplier,
            message=message or f"⚡ CRITICAL HIT! XP {format_multiplier(multiplier)}!",
            timestamp=now,
            effects=[EffectTag.CRITICAL_FLASH, EffectTag.SCREEN_SHAKE, EffectTag.GOLDEN_EFFECT],
        )

    def describe(self) -> str:
        return f"Critical {format_multiplier(self.state.multiplier)}"
