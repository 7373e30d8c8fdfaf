"""
Adrenaline System Models
State, events and rewards shared by the reward engine components.

Every model ignores unknown fields so persisted snapshots written by newer or
older builds still load.
"""
import logging
import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class TolerantEnum(str, Enum):
    """String enum whose ``parse`` falls back to its first (lowest) member"""

    @classmethod
    def parse(cls, value) -> "TolerantEnum":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            fallback = next(iter(cls))
            logger.warning(f"Unknown {cls.__name__} {value!r}, using {fallback.value}")
            return fallback


class Difficulty(TolerantEnum):
    """Question difficulty supplied with a treasure box trigger"""
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


class TreasureTier(TolerantEnum):
    """Treasure box tiers, lowest first"""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    RAINBOW = "rainbow"


class RewardRarity(TolerantEnum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class RewardKind(TolerantEnum):
    XP = "xp"
    HEARTS = "hearts"
    STARS = "stars"
    TICKET = "gacha_ticket"
    SPECIAL_ITEM = "special_item"


class EventKind(str, Enum):
    """One-shot engine events surfaced to the host as banners"""
    COMBO_START = "combo_start"
    COMBO_BREAK = "combo_break"
    CRITICAL_HIT = "critical_hit"
    FEVER_TIME_START = "fever_time_start"
    FEVER_TIME_END = "fever_time_end"
    PRESSURE_BURST = "pressure_burst"
    TREASURE_BOX_EARNED = "treasure_box_earned"
    DAILY_BONUS_INCREASED = "daily_bonus_increased"


class EffectTag(str, Enum):
    """Presentation hints attached to events. No engine semantics."""
    COMBO_MULTIPLIER = "combo_multiplier"
    VISUAL_FIRE = "visual_fire"
    COMBO_BREAK_EFFECT = "combo_break_effect"
    SCREEN_FADE = "screen_fade"
    CRITICAL_FLASH = "critical_flash"
    SCREEN_SHAKE = "screen_shake"
    GOLDEN_EFFECT = "golden_effect"
    FEVER_BACKGROUND = "fever_background"
    SPARKLE_EFFECT = "sparkle_effect"
    MUSIC_CHANGE = "music_change"
    BURST_EFFECT = "burst_effect"
    SCREEN_PULSE = "screen_pulse"
    ENERGY_AURA = "energy_aura"
    TREASURE_GLOW = "treasure_glow"
    DAILY_FLAME = "daily_flame"


class EngineModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AdrenalineEvent(EngineModel):
    """Event payload handed to the presentation layer"""
    kind: EventKind
    value: float
    multiplier: float
    message: str
    timestamp: int
    effects: List[EffectTag] = Field(default_factory=list)
    extra_effects: List[str] = Field(default_factory=list)  # free-form tags


# ==================== Component State ====================

class ComboState(EngineModel):
    current_streak: int = 0
    best_streak: int = 0
    multiplier: float = 1.0
    last_success_time: Optional[int] = None
    timeout_ms: int = 10_000


class CriticalState(EngineModel):
    base_rate: float = 0.05
    multiplier: float = 3.0
    total_count: int = 0
    current_run_length: int = 0
    last_critical_time: Optional[int] = None


class FeverState(EngineModel):
    active: bool = False
    start_time: Optional[int] = None
    duration_ms: int = 180_000
    multiplier: float = 2.0
    trigger_rate: float = 0.05
    cooldown_ms: int = 1_800_000
    last_trigger_time: Optional[int] = None


class PressureState(EngineModel):
    current: int = 0
    max: int = 100
    burst_threshold: int = 100
    increment: int = 10
    decrement: int = 20
    burst_multiplier: float = 3.0
    burst_duration_ms: int = 300_000
    last_burst_time: Optional[int] = None


class DailyBonusRecord(EngineModel):
    date: datetime.date
    multiplier: float
    xp_earned: int = 0
    streak: int


class DailyStreakState(EngineModel):
    consecutive_days: int = 0
    current_multiplier: float = 1.0
    last_login_date: Optional[datetime.date] = None
    max_multiplier: float = 2.0
    history: List[DailyBonusRecord] = Field(default_factory=list)


# ==================== Treasure Boxes ====================

class TreasureReward(EngineModel):
    kind: RewardKind
    amount: int
    rarity: RewardRarity
    description: str

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, v):
        return RewardKind.parse(v)

    @field_validator("rarity", mode="before")
    @classmethod
    def _parse_rarity(cls, v):
        return RewardRarity.parse(v)


class TreasureBox(EngineModel):
    id: str
    tier: TreasureTier
    rarity_weight: float
    rewards: List[TreasureReward] = Field(default_factory=list)
    is_opened: bool = False
    opened_at: Optional[int] = None
    earned_at: Optional[int] = None

    @field_validator("tier", mode="before")
    @classmethod
    def _parse_tier(cls, v):
        return TreasureTier.parse(v)


# ==================== Aggregate ====================

class AdrenalineStats(EngineModel):
    total_combos: int = 0
    max_combo_achieved: int = 0
    total_criticals: int = 0
    treasure_boxes_earned: int = 0
    treasure_boxes_opened: int = 0
    fever_times_triggered: int = 0
    pressure_bursts_used: int = 0
    total_bonus_xp: int = 0
    average_multiplier: float = 1.0
    rewards_computed: int = 0


class AdrenalineSystem(EngineModel):
    """Aggregate root persisted as one snapshot"""
    combo: ComboState = Field(default_factory=ComboState)
    critical: CriticalState = Field(default_factory=CriticalState)
    fever: FeverState = Field(default_factory=FeverState)
    pressure: PressureState = Field(default_factory=PressureState)
    daily_streak: DailyStreakState = Field(default_factory=DailyStreakState)
    treasure_boxes: List[TreasureBox] = Field(default_factory=list)
    stats: AdrenalineStats = Field(default_factory=AdrenalineStats)
    enabled: bool = True


# ==================== Query Results ====================

class RewardResult(EngineModel):
    final_amount: int
    multiplier: float
    breakdown: List[str]


class ComboStatus(EngineModel):
    combo: int
    multiplier: float
    time_left_ms: int


class FeverStatus(EngineModel):
    active: bool
    time_left_ms: int


class PressureStatus(EngineModel):
    current: int
    max: int
    percentage: float
    can_burst: bool
    burst_active: bool
    burst_time_left_ms: int
