import logging
import random

from adrenaline.gamification import AdrenalineComposer, Difficulty, EventKind
from adrenaline.storage import InMemoryStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class SimulatedClock:
    def __init__(self, start_ms: int):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def simulate_session(answers: int = 60, accuracy: float = 0.8, seed: int = 7):
    rng = random.Random(seed)
    clock = SimulatedClock(1_700_000_000_000)
    composer = AdrenalineComposer(store=InMemoryStore(), clock=clock, rng=random.Random(seed))

    for event in composer.start_session():
        logger.info(f"📅 {event.message}")

    total_xp = 0
    for i in range(answers):
        # 3-12 seconds per answer keeps most combos alive
        clock.advance(rng.randint(3_000, 12_000))

        if rng.random() < accuracy:
            events = composer.on_correct_answer()
            is_critical = any(e.kind == EventKind.CRITICAL_HIT for e in events)
            reward = composer.compute_reward(10, is_critical=is_critical)
            total_xp += reward.final_amount
        else:
            events = composer.on_incorrect_answer()

        for event in events:
            logger.info(f"[{i:>3}] {event.kind.value}: {event.message}")

        if i % 15 == 14:
            box = composer.earn_treasure_box(Difficulty.HARD)
            rewards = composer.open_treasure_box(box.id)
            logger.info(f"🎁 {box.tier.value} box: " + ", ".join(f"{r.kind.value} x{r.amount}" for r in rewards))

    stats = composer.stats()
    logger.info(f"--- Session complete: {total_xp} XP ---")
    logger.info(f"Best combo: {stats.max_combo_achieved}, criticals: {stats.total_criticals}, "
                f"fevers: {stats.fever_times_triggered}, bursts: {stats.pressure_bursts_used}")
    logger.info(f"Average multiplier: {stats.average_multiplier:.2f}, bonus XP: {stats.total_bonus_xp}")


if __name__ == "__main__":
    simulate_session()
