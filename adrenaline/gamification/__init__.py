"""
Adrenaline Reward Engine
"""
from .composer import AdrenalineComposer
from .loot_boxes import LootBoxEngine, reward_templates, tier_for_roll, tier_probabilities
from .models import (
    AdrenalineEvent,
    AdrenalineSystem,
    Difficulty,
    EventKind,
    TreasureBox,
    TreasureReward,
    TreasureTier,
)

__all__ = [
    "AdrenalineComposer",
    "AdrenalineEvent",
    "AdrenalineSystem",
    "Difficulty",
    "EventKind",
    "LootBoxEngine",
    "TreasureBox",
    "TreasureReward",
    "TreasureTier",
    "reward_templates",
    "tier_for_roll",
    "tier_probabilities",
]
