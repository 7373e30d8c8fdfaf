"""
Loot Box Engine - weighted-random treasure boxes with deferred redemption.

Tier selection and reward content are separate steps:
- ``tier_for_roll`` buckets a uniform roll (plus a difficulty bonus) into a tier.
- ``reward_templates`` maps a tier to its fixed reward table.
- ``realize_rewards`` rolls concrete amounts and optional drops from a table.

Rewards are generated when a box is earned; opening only reveals them.

Tier thresholds apply to the adjusted roll ``roll + bonus``. The bonus can
push a roll into a rarer bucket but never wraps past 1.0, so the effective
rainbow probability is ``P(roll >= 0.99 - bonus)``: 1% on easy, 11% on
normal and 21% on hard.
"""
import logging
import random
import uuid
from typing import Dict, List, Optional, Union

from pydantic import BaseModel

from adrenaline.gamification.models import (
    Difficulty,
    RewardKind,
    RewardRarity,
    TreasureBox,
    TreasureReward,
    TreasureTier,
)

logger = logging.getLogger(__name__)


DIFFICULTY_BONUS = {
    Difficulty.EASY: 0.0,
    Difficulty.NORMAL: 0.1,
    Difficulty.HARD: 0.2,
}

# (minimum adjusted roll, tier), rarest first; anything lower is bronze
TIER_THRESHOLDS = [
    (0.99, TreasureTier.RAINBOW),
    (0.90, TreasureTier.GOLD),
    (0.70, TreasureTier.SILVER),
]

RARITY_WEIGHTS = {
    TreasureTier.BRONZE: 0.7,
    TreasureTier.SILVER: 0.2,
    TreasureTier.GOLD: 0.1,
    TreasureTier.RAINBOW: 0.001,
}


class RewardTemplate(BaseModel):
    """One line of a tier's reward table"""
    kind: RewardKind
    min_amount: int
    max_amount: int
    rarity: RewardRarity
    description: str
    chance: float = 1.0  # probability the line drops at all


REWARD_TABLES: Dict[TreasureTier, List[RewardTemplate]] = {
    TreasureTier.BRONZE: [
        RewardTemplate(kind=RewardKind.XP, min_amount=50, max_amount=99, rarity=RewardRarity.COMMON, description="Bonus XP"),
    ],
    TreasureTier.SILVER: [
        RewardTemplate(kind=RewardKind.XP, min_amount=100, max_amount=199, rarity=RewardRarity.RARE, description="Big bonus XP"),
        RewardTemplate(kind=RewardKind.HEARTS, min_amount=1, max_amount=1, rarity=RewardRarity.RARE, description="Heart refill", chance=0.3),
    ],
    TreasureTier.GOLD: [
        RewardTemplate(kind=RewardKind.XP, min_amount=200, max_amount=399, rarity=RewardRarity.EPIC, description="Huge bonus XP"),
        RewardTemplate(kind=RewardKind.TICKET, min_amount=1, max_amount=1, rarity=RewardRarity.EPIC, description="Free gacha ticket"),
        RewardTemplate(kind=RewardKind.STARS, min_amount=1, max_amount=1, rarity=RewardRarity.EPIC, description="Star refill", chance=0.5),
    ],
    TreasureTier.RAINBOW: [
        RewardTemplate(kind=RewardKind.XP, min_amount=500, max_amount=999, rarity=RewardRarity.LEGENDARY, description="Legendary bonus XP"),
        RewardTemplate(kind=RewardKind.TICKET, min_amount=3, max_amount=3, rarity=RewardRarity.LEGENDARY, description="Premium gacha tickets x3"),
        RewardTemplate(kind=RewardKind.SPECIAL_ITEM, min_amount=1, max_amount=1, rarity=RewardRarity.LEGENDARY, description="Permanent XP multiplier +10%"),
    ],
}


def difficulty_bonus(difficulty: Union[Difficulty, str]) -> float:
    return DIFFICULTY_BONUS[Difficulty.parse(difficulty)]


def tier_for_roll(roll: float, difficulty: Union[Difficulty, str] = Difficulty.EASY) -> TreasureTier:
    adjusted = roll + difficulty_bonus(difficulty)
    for threshold, tier in TIER_THRESHOLDS:
        if adjusted >= threshold:
            return tier
    return TreasureTier.BRONZE


def tier_probabilities(difficulty: Union[Difficulty, str]) -> Dict[TreasureTier, float]:
    """Analytic tier distribution for a uniform roll in [0, 1)"""
    bonus = difficulty_bonus(difficulty)
    probabilities = {}
    upper = 1.0
    for threshold, tier in TIER_THRESHOLDS:
        lower = min(1.0, max(0.0, threshold - bonus))
        probabilities[tier] = max(0.0, upper - lower)
        upper = min(upper, lower)
    probabilities[TreasureTier.BRONZE] = upper
    return probabilities


def reward_templates(tier: Union[TreasureTier, str]) -> List[RewardTemplate]:
    return list(REWARD_TABLES[TreasureTier.parse(tier)])


def realize_rewards(templates: List[RewardTemplate], rng: random.Random) -> List[TreasureReward]:
    rewards = []
    for template in templates:
        if template.chance < 1.0 and rng.random() >= template.chance:
            continue
        rewards.append(
            TreasureReward(
                kind=template.kind,
                amount=rng.randint(template.min_amount, template.max_amount),
                rarity=template.rarity,
                description=template.description,
            )
        )
    return rewards


class LootBoxEngine:
    """
    Generates treasure boxes and holds the unopened inventory.

    ``boxes`` is the live inventory list from the persisted state; the engine
    appends to and mutates it in place.
    """

    def __init__(self, boxes: List[TreasureBox], rng: random.Random):
        self.boxes = boxes
        self.rng = rng

    def generate(self, difficulty: Union[Difficulty, str], now: int) -> TreasureBox:
        tier = tier_for_roll(self.rng.random(), difficulty)
        return TreasureBox(
            id=f"treasure_{uuid.uuid4().hex}",
            tier=tier,
            rarity_weight=RARITY_WEIGHTS[tier],
            rewards=realize_rewards(reward_templates(tier), self.rng),
            is_opened=False,
            earned_at=now,
        )

    def earn(self, difficulty: Union[Difficulty, str], now: int) -> TreasureBox:
        box = self.generate(difficulty, now)
        self.boxes.append(box)
        logger.info(f"Treasure box earned: {box.tier.value} ({box.id})")
        return box

    def find(self, box_id: str) -> Optional[TreasureBox]:
        for box in self.boxes:
            if box.id == box_id:
                return box
        return None

    def open(self, box_id: str, now: int) -> List[TreasureReward]:
        """
        Redeem a box. Unknown or already-opened ids yield an empty list so
        client retries are safe.
        """
        box = self.find(box_id)
        if box is None or box.is_opened:
            logger.debug(f"Ignoring open request for {box_id}")
            return []

        box.is_opened = True
        box.opened_at = now
        logger.info(f"Treasure box opened: {box.tier.value} ({box.id})")
        return [reward.model_copy() for reward in box.rewards]

    def inventory(self, unopened_only: bool = False) -> List[TreasureBox]:
        return [box for box in self.boxes if not (unopened_only and box.is_opened)]
