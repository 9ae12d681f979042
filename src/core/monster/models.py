"""Monster domain models

DB-independent dataclasses shared by the decay engine, the leveling
calculator and the interaction resolver.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class Mood(str, Enum):
    """Five moods. Exactly one at any time."""

    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    HUNGRY = "hungry"
    SLEEPY = "sleepy"


class MonsterAction(str, Enum):
    """User interactions that can fix a mood."""

    FEED = "feed"
    SLEEP = "sleep"
    PLAY = "play"
    CUDDLE = "cuddle"


# Legacy rows may carry a raw string (or nothing at all) in the timer column.
Timestamp = Union[datetime, str, None]


@dataclass
class Monster:
    """Monster snapshot. Identity fields are not read by the core."""

    monster_id: str
    owner_id: str
    name: str = ""
    template_id: str = ""

    mood: Mood = Mood.HAPPY
    last_mood_change_at: Timestamp = None
    next_mood_change_at: Timestamp = None

    # derived from total_xp
    level: int = 1
    current_level_xp: int = 0
    total_xp: int = 0

    # daily play counter
    daily_play_count: int = 0
    last_play_date: Optional[str] = None  # YYYY-MM-DD, UTC

    # listed in the public gallery
    is_public: bool = False

    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class StateChangeResult:
    """Outcome of a lazy decay check.

    last_mood_change_at is only set when changed is True.
    """

    changed: bool
    mood: Mood
    next_mood_change_at: datetime
    last_mood_change_at: Optional[datetime] = None


@dataclass(frozen=True)
class TimingFields:
    mood: Mood
    last_mood_change_at: datetime
    next_mood_change_at: datetime


@dataclass(frozen=True)
class LevelInfo:
    """xp_for_next_level == 0 marks the max level."""

    level: int
    current_level_xp: int
    xp_for_next_level: int


@dataclass(frozen=True)
class XPResult:
    new_total_xp: int
    new_level: int
    new_current_xp: int
    xp_for_next_level: int
    leveled_up: bool
    old_level: int
