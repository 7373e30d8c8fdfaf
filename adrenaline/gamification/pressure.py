"""
Pressure Gauge
Charges on success, drains on failure, and bursts into a time-boxed
multiplier when full.
"""
import logging
from typing import List

from adrenaline.core.clock import elapsed_ms
from adrenaline.gamification.base import format_multiplier
from adrenaline.gamification.models import (
    AdrenalineEvent,
    EffectTag,
    EventKind,
    PressureState,
)

logger = logging.getLogger(__name__)


class PressureGauge:

    name = "pressure"

    def __init__(self, state: PressureState):
        self.state = state

    def is_active(self, now: int) -> bool:
        return self.is_burst_active(now)

    def current_multiplier(self, now: int) -> float:
        return self.state.burst_multiplier

    def describe(self, now: int) -> str:
        return f"Pressure burst {format_multiplier(self.state.burst_multiplier)}"

    def on_correct(self, now: int) -> List[AdrenalineEvent]:
        state = self.state
        state.current = min(state.current + state.increment, state.max)

        if state.current >= state.burst_threshold:
            return [self.burst(now)]
        return []

    def on_incorrect(self, now: int) -> List[AdrenalineEvent]:
        self.state.current = max(self.state.current - self.state.decrement, 0)
        return []

    def burst(self, now: int) -> AdrenalineEvent:
        state = self.state
        state.current = 0
        state.last_burst_time = now

        minutes = state.burst_duration_ms / 60000
        logger.info(f"Pressure burst for {minutes:g} min")
        return AdrenalineEvent(
            kind=EventKind.PRESSURE_BURST,
            value=state.burst_duration_ms / 1000,
            multiplier=state.burst_multiplier,
            message=f"💥 PRESSURE BURST! XP {format_multiplier(state.burst_multiplier)} for {minutes:g} minutes!",
            timestamp=now,
            effects=[EffectTag.BURST_EFFECT, EffectTag.SCREEN_PULSE, EffectTag.ENERGY_AURA],
        )

    def is_burst_active(self, now: int) -> bool:
        elapsed = elapsed_ms(now, self.state.last_burst_time)
        return elapsed is not None and elapsed < self.state.burst_duration_ms

    def burst_time_left_ms(self, now: int) -> int:
        elapsed = elapsed_ms(now, self.state.last_burst_time)
        if elapsed is None:
            return 0
        return max(0, self.state.burst_duration_ms - elapsed)

    @property
    def percentage(self) -> float:
        if self.state.max <= 0:
            return 0.0
        return self.state.current / self.state.max * 100
