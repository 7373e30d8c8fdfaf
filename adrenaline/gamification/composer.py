"""
Reward Composer
Top-level facade of the engagement-reward engine.

The host calls ``on_correct_answer`` / ``on_incorrect_answer`` once per
answer and ``compute_reward`` to scale a base XP amount. Sub-components are
driven in a fixed order (combo, critical, fever, pressure) and the whole
aggregate is persisted as one snapshot after each mutation.

Persistence is best effort: store failures are logged and the engine keeps
working from memory.
"""
import logging
import math
import random
import threading
from typing import Callable, List, Optional, Union

from adrenaline.core.clock import NullScheduler, Scheduler, utc_date, wall_clock_ms
from adrenaline.core.config import settings
from adrenaline.gamification.base import MultiplierSource
from adrenaline.gamification.combo import MIN_COMBO_STREAK, ComboTracker
from adrenaline.gamification.critical import CriticalEventGenerator
from adrenaline.gamification.daily_streak import DailyStreakBonus
from adrenaline.gamification.fever import FeverWindow
from adrenaline.gamification.loot_boxes import LootBoxEngine
from adrenaline.gamification.models import (
    AdrenalineEvent,
    AdrenalineStats,
    AdrenalineSystem,
    ComboStatus,
    CriticalState,
    Difficulty,
    EffectTag,
    EventKind,
    FeverState,
    FeverStatus,
    PressureStatus,
    RewardResult,
    TreasureBox,
    TreasureReward,
)
from adrenaline.gamification.pressure import PressureGauge
from adrenaline.gamification.snapshot import decode_system, encode_system
from adrenaline.storage import StateStore

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AdrenalineComposer:
    """
    Owns one user's adrenaline state.

    One instance per user session, passed explicitly to whatever handles
    answer submission. All mutations and lazily-expiring reads are serialized
    by an internal re-entrant lock.
    """

    def __init__(
        self,
        store: Optional[StateStore] = None,
        storage_key: str = settings.STORAGE_KEY,
        clock: Callable[[], int] = wall_clock_ms,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
        critical_base_rate: float = settings.CRITICAL_BASE_RATE,
        fever_trigger_rate: float = settings.FEVER_TRIGGER_RATE,
    ):
        self.store = store
        self.storage_key = storage_key
        self.clock = clock
        self.rng = rng or random.Random()
        self.scheduler = scheduler or NullScheduler()
        self.critical_base_rate = critical_base_rate
        self.fever_trigger_rate = fever_trigger_rate

        self._lock = threading.RLock()
        self._fever_epoch = 0
        self._pending_events: List[AdrenalineEvent] = []

        self._system = self._load()
        self._bind()

        if self._system.fever.active:
            # window carried over from a previous process
            self._schedule_fever_expiry(self.fever.time_left_ms(self.clock()))

    # ==================== State lifecycle ====================

    def default_system(self) -> AdrenalineSystem:
        return AdrenalineSystem(
            critical=CriticalState(base_rate=self.critical_base_rate),
            fever=FeverState(trigger_rate=self.fever_trigger_rate),
        )

    def _load(self) -> AdrenalineSystem:
        defaults = self.default_system()
        if self.store is None:
            return defaults

        try:
            blob = self.store.load(self.storage_key)
        except Exception as e:
            logger.error(f"Failed to load adrenaline state: {e}")
            return defaults

        if blob is None:
            return defaults
        return decode_system(blob, defaults)

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.storage_key, encode_system(self._system))
        except Exception as e:
            logger.error(f"Failed to save adrenaline state: {e}")

    def _bind(self) -> None:
        system = self._system
        self.combo = ComboTracker(system.combo)
        self.critical = CriticalEventGenerator(system.critical, self.rng)
        self.fever = FeverWindow(system.fever, self.rng)
        self.pressure = PressureGauge(system.pressure)
        self.daily_streak = DailyStreakBonus(system.daily_streak)
        self.loot = LootBoxEngine(system.treasure_boxes, self.rng)
        # composition order of the reward multiplier
        self.sources: List[MultiplierSource] = [self.combo, self.daily_streak, self.fever, self.pressure]

    def reset(self) -> None:
        """Restore defaults and persist. Pending fever timers are invalidated."""
        with self._lock:
            self.scheduler.cancel_all()
            self._fever_epoch += 1
            self._pending_events = []
            self._system = self.default_system()
            self._bind()
            self._persist()
        logger.info("Adrenaline system reset")

    def shutdown(self) -> None:
        self.scheduler.cancel_all()

    @property
    def enabled(self) -> bool:
        return self._system.enabled

    def set_enabled(self, enabled: bool) -> None:
        with self._lock:
            self._system.enabled = bool(enabled)
            self._persist()

    # ==================== Fever timer ====================

    def _fever_started(self) -> None:
        self._fever_epoch += 1
        self._system.stats.fever_times_triggered += 1
        self._schedule_fever_expiry(self._system.fever.duration_ms)

    def _schedule_fever_expiry(self, delay_ms: int) -> None:
        epoch = self._fever_epoch
        self.scheduler.schedule(delay_ms, lambda: self._on_fever_timer(epoch))

    def _on_fever_timer(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._fever_epoch:
                logger.debug(f"Ignoring stale fever timer (epoch {epoch}, current {self._fever_epoch})")
                return
            event = self.fever.end(self.clock())
            if event is not None:
                self._pending_events.append(event)
                self._persist()

    def _expire(self, now: int) -> bool:
        """Apply lazy expiry to time-boxed sources. Returns True if state changed."""
        changed = self.combo.expire_if_idle(now)
        event = self.fever.expire(now)
        if event is not None:
            self._pending_events.append(event)
            changed = True
        return changed

    def _drain_pending(self) -> List[AdrenalineEvent]:
        events, self._pending_events = self._pending_events, []
        return events

    def _banners(self, events: List[AdrenalineEvent]) -> List[AdrenalineEvent]:
        """Events handed to the host. A disabled engine keeps its state current but stays silent."""
        if self._system.enabled:
            return events
        if events:
            logger.debug(f"Engine disabled, suppressing {len(events)} event(s)")
        return []

    # ==================== Answer events ====================

    def on_correct_answer(self, is_critical: Optional[bool] = None, forced: bool = False) -> List[AdrenalineEvent]:
        """
        Process a correct answer.

        ``is_critical=True`` forces the critical roll to fire; ``forced``
        forces every probabilistic trigger (critical and fever) to fire.
        """
        with self._lock:
            now = self.clock()
            self._expire(now)
            events = self._drain_pending()
            stats = self._system.stats

            new_events = self.combo.on_correct(now)
            if self.combo.state.current_streak == MIN_COMBO_STREAK:
                stats.total_combos += 1
            stats.max_combo_achieved = max(stats.max_combo_achieved, self.combo.state.best_streak)

            critical_events = self.critical.roll(now, forced=forced or bool(is_critical))
            stats.total_criticals += len(critical_events)
            new_events.extend(critical_events)

            fever_events = self.fever.maybe_start(now, forced=forced)
            if fever_events:
                self._fever_started()
            new_events.extend(fever_events)

            pressure_events = self.pressure.on_correct(now)
            stats.pressure_bursts_used += len(pressure_events)
            new_events.extend(pressure_events)

            events.extend(new_events)
            self._persist()
            return self._banners(events)

    def on_incorrect_answer(self) -> List[AdrenalineEvent]:
        with self._lock:
            now = self.clock()
            self._expire(now)
            events = self._drain_pending()

            events.extend(self.combo.on_incorrect(now))
            events.extend(self.pressure.on_incorrect(now))
            self.critical.reset_run()

            self._persist()
            return self._banners(events)

    def start_session(self) -> List[AdrenalineEvent]:
        """Evaluate the daily login streak. Call once at session start."""
        with self._lock:
            now = self.clock()
            self._expire(now)
            events = self._drain_pending()
            events.extend(self.daily_streak.evaluate(utc_date(now), now))
            self._persist()
            return self._banners(events)

    # ==================== Reward composition ====================

    def compute_reward(self, base_amount: int, is_critical: bool = False) -> RewardResult:
        """
        Scale ``base_amount`` by every active multiplier source.

        Factors and breakdown lines follow the same fixed order: combo,
        daily streak, fever, pressure burst, critical.
        """
        with self._lock:
            base_amount = max(0, int(base_amount))
            breakdown = [f"Base XP: {base_amount}"]

            now = self.clock()
            self._expire(now)

            multiplier = 1.0
            for source in self.sources:
                if source.is_active(now):
                    multiplier *= source.current_multiplier(now)
                    breakdown.append(source.describe(now))

            if is_critical:
                multiplier *= self.critical.state.multiplier
                breakdown.append(self.critical.describe())

            final_amount = round_half_up(base_amount * multiplier)

            stats = self._system.stats
            stats.total_bonus_xp += final_amount - base_amount
            stats.rewards_computed += 1
            stats.average_multiplier += (multiplier - stats.average_multiplier) / stats.rewards_computed
            self.daily_streak.record_xp(utc_date(now), final_amount)

            self._persist()
            return RewardResult(final_amount=final_amount, multiplier=multiplier, breakdown=breakdown)

    # ==================== Treasure boxes ====================

    def earn_treasure_box(self, difficulty: Union[Difficulty, str] = Difficulty.NORMAL, forced: bool = False) -> TreasureBox:
        """
        Generate a box into the inventory.

        ``forced`` marks a box granted outside normal play (debug and test
        events); the tier roll is the same either way.
        """
        with self._lock:
            now = self.clock()
            box = self.loot.earn(Difficulty.parse(difficulty), now)
            if forced:
                logger.info(f"Forced treasure box granted: {box.id}")
            self._system.stats.treasure_boxes_earned += 1
            self._persist()
            return box.model_copy(deep=True)

    def open_treasure_box(self, box_id: str) -> List[TreasureReward]:
        with self._lock:
            rewards = self.loot.open(box_id, self.clock())
            if rewards:
                self._system.stats.treasure_boxes_opened += 1
                self._persist()
            return rewards

    def list_treasure_boxes(self, unopened_only: bool = False) -> List[TreasureBox]:
        with self._lock:
            return [box.model_copy(deep=True) for box in self.loot.inventory(unopened_only)]

    # ==================== Status queries ====================

    def _read(self, now: Optional[int]) -> int:
        """Resolve ``now`` and apply lazy expiry, persisting on transition"""
        now = self.clock() if now is None else now
        if self._expire(now):
            self._persist()
        return now

    def combo_status(self, now: Optional[int] = None) -> ComboStatus:
        with self._lock:
            now = self._read(now)
            return ComboStatus(
                combo=self.combo.state.current_streak,
                multiplier=self.combo.state.multiplier,
                time_left_ms=self.combo.time_left_ms(now),
            )

    def fever_status(self, now: Optional[int] = None) -> FeverStatus:
        with self._lock:
            now = self._read(now)
            return FeverStatus(
                active=self.fever.is_active(now),
                time_left_ms=self.fever.time_left_ms(now),
            )

    def pressure_status(self, now: Optional[int] = None) -> PressureStatus:
        with self._lock:
            now = self.clock() if now is None else now
            state = self.pressure.state
            return PressureStatus(
                current=state.current,
                max=state.max,
                percentage=self.pressure.percentage,
                can_burst=state.current >= state.burst_threshold,
                burst_active=self.pressure.is_burst_active(now),
                burst_time_left_ms=self.pressure.burst_time_left_ms(now),
            )

    def snapshot(self) -> AdrenalineSystem:
        """Deep copy of the full state"""
        with self._lock:
            return self._system.model_copy(deep=True)

    def stats(self) -> AdrenalineStats:
        with self._lock:
            return self._system.stats.model_copy()

    # ==================== Debug ====================

    def trigger_test_event(self, kind: Union[EventKind, str]) -> List[AdrenalineEvent]:
        try:
            kind = EventKind(kind)
        except ValueError:
            logger.warning(f"Unknown test event kind {kind!r}")
            return []

        with self._lock:
            now = self.clock()

            if kind == EventKind.CRITICAL_HIT:
                return [self.critical.hit_event(now, message="⚡ TEST CRITICAL HIT!")]

            if kind == EventKind.FEVER_TIME_START:
                event = self.fever.start(now)
                self._fever_started()
                self._persist()
                return [event]

            if kind == EventKind.PRESSURE_BURST:
                event = self.pressure.burst(now)
                self._system.stats.pressure_bursts_used += 1
                self._persist()
                return [event]

            if kind == EventKind.TREASURE_BOX_EARNED:
                box = self.earn_treasure_box(Difficulty.NORMAL, forced=True)
                return [
                    AdrenalineEvent(
                        kind=EventKind.TREASURE_BOX_EARNED,
                        value=box.rarity_weight,
                        multiplier=1.0,
                        message=f"🎁 TEST {box.tier.value} treasure box!",
                        timestamp=now,
                        effects=[EffectTag.TREASURE_GLOW],
                        extra_effects=[f"tier:{box.tier.value}"],
                    )
                ]

            return []
