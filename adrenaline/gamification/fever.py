"""
Fever Window
Cooldown-gated, time-boxed global multiplier.

A window ends through whichever path observes it first: the deferred expiry
callback or a status read after the duration has passed. Ending is
idempotent, so both paths converge on a single ``fever_time_end`` event.
"""
import logging
import random
from typing import List, Optional

from adrenaline.core.clock import elapsed_ms
from adrenaline.gamification.base import format_multiplier
from adrenaline.gamification.models import (
    AdrenalineEvent,
    EffectTag,
    EventKind,
    FeverState,
)

logger = logging.getLogger(__name__)


class FeverWindow:

    name = "fever"

    def __init__(self, state: FeverState, rng: random.Random):
        self.state = state
        self.rng = rng

    def is_active(self, now: int) -> bool:
        return self.state.active and not self._expired(now)

    def current_multiplier(self, now: int) -> float:
        return self.state.multiplier

    def describe(self, now: int) -> str:
        return f"Fever time {format_multiplier(self.state.multiplier)}"

    def can_start(self, now: int) -> bool:
        if self.state.active:
            return False
        elapsed = elapsed_ms(now, self.state.last_trigger_time)
        return elapsed is None or elapsed >= self.state.cooldown_ms

    def maybe_start(self, now: int, forced: bool = False) -> List[AdrenalineEvent]:
        if not self.can_start(now):
            return []
        if not (forced or self.rng.random() < self.state.trigger_rate):
            return []
        return [self.start(now)]

    def start(self, now: int) -> AdrenalineEvent:
        """Open a window unconditionally"""
        state = self.state
        state.active = True
        state.start_time = now
        state.last_trigger_time = now

        seconds = state.duration_ms / 1000
        logger.info(f"Fever time started for {seconds:g}s")
        return AdrenalineEvent(
            kind=EventKind.FEVER_TIME_START,
            value=seconds,
            multiplier=state.multiplier,
            message=f"🎊 FEVER TIME! XP {format_multiplier(state.multiplier)} for {seconds:g} seconds!",
            timestamp=now,
            effects=[EffectTag.FEVER_BACKGROUND, EffectTag.SPARKLE_EFFECT, EffectTag.MUSIC_CHANGE],
        )

    def end(self, now: int) -> Optional[AdrenalineEvent]:
        """Close the window. Returns None when it was already closed."""
        if not self.state.active:
            return None

        self.state.active = False
        logger.info("Fever time ended")
        return AdrenalineEvent(
            kind=EventKind.FEVER_TIME_END,
            value=0,
            multiplier=1.0,
            message="Fever time is over",
            timestamp=now,
            effects=[EffectTag.FEVER_BACKGROUND],
        )

    def expire(self, now: int) -> Optional[AdrenalineEvent]:
        """Lazy expiry: close the window if its duration has passed"""
        if self.state.active and self._expired(now):
            return self.end(now)
        return None

    def time_left_ms(self, now: int) -> int:
        if not self.state.active:
            return 0
        elapsed = elapsed_ms(now, self.state.start_time) or 0
        return max(0, self.state.duration_ms - elapsed)

    def _expired(self, now: int) -> bool:
        elapsed = elapsed_ms(now, self.state.start_time)
        # an active window without a start time cannot be timed; treat as over
        return elapsed is None or elapsed >= self.state.duration_ms
