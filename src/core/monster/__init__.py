"""Monster Core - pure Python, DB-independent"""

from src.core.monster.models import (
    LevelInfo,
    Monster,
    MonsterAction,
    Mood,
    StateChangeResult,
    TimingFields,
    XPResult,
)
from src.core.monster.decay import (
    DECAY_MOODS,
    compute_current_state,
    initialize_timing,
    pick_decay_mood,
    schedule_next_change,
    time_until_next_change,
)
from src.core.monster.leveling import (
    MAX_LEVEL,
    XP_PER_ACTION,
    XP_PER_DAILY_PLAY,
    XP_PER_GIFT,
    add_xp,
    level_for_total_xp,
    progress_percent,
)
from src.core.monster.interaction import (
    DAILY_PLAY_LIMIT,
    REQUIRED_ACTION,
    AlreadySatisfied,
    InteractionError,
    InteractionResult,
    LimitReached,
    UnknownAction,
    WrongAction,
    resolve_daily_play,
    resolve_gift,
    resolve_interaction,
)

__all__ = [
    "LevelInfo",
    "Monster",
    "MonsterAction",
    "Mood",
    "StateChangeResult",
    "TimingFields",
    "XPResult",
    "DECAY_MOODS",
    "compute_current_state",
    "initialize_timing",
    "pick_decay_mood",
    "schedule_next_change",
    "time_until_next_change",
    "MAX_LEVEL",
    "XP_PER_ACTION",
    "XP_PER_DAILY_PLAY",
    "XP_PER_GIFT",
    "add_xp",
    "level_for_total_xp",
    "progress_percent",
    "DAILY_PLAY_LIMIT",
    "REQUIRED_ACTION",
    "AlreadySatisfied",
    "InteractionError",
    "InteractionResult",
    "LimitReached",
    "UnknownAction",
    "WrongAction",
    "resolve_daily_play",
    "resolve_gift",
    "resolve_interaction",
]
