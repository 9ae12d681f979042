"""Interaction resolution

Mood state machine. Each negative mood has exactly one fixing action:

    hungry -> feed
    sleepy -> sleep
    sad    -> play
    angry  -> cuddle
    happy  -> nothing accepted

A matching action is the only way back to happy after creation. Gifts and
daily play grant XP and never touch mood or timers.

Every failure is an expected user outcome and is returned, not raised.
"""

import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from src.core.monster.decay import compute_current_state, initialize_timing, to_utc
from src.core.monster.leveling import (
    XP_PER_ACTION,
    XP_PER_DAILY_PLAY,
    XP_PER_GIFT,
    add_xp,
)
from src.core.monster.models import (
    Monster,
    MonsterAction,
    Mood,
    StateChangeResult,
    XPResult,
)

DAILY_PLAY_LIMIT = 5

REQUIRED_ACTION: dict[Mood, MonsterAction] = {
    Mood.HUNGRY: MonsterAction.FEED,
    Mood.SLEEPY: MonsterAction.SLEEP,
    Mood.SAD: MonsterAction.PLAY,
    Mood.ANGRY: MonsterAction.CUDDLE,
}

MOOD_FIXED_BY: dict[MonsterAction, Mood] = {
    action: mood for mood, action in REQUIRED_ACTION.items()
}


# ── Errors ──────────────────────────────────────────────────


@dataclass(frozen=True)
class InteractionError:
    code: str


@dataclass(frozen=True)
class AlreadySatisfied(InteractionError):
    code: str = "already_satisfied"


@dataclass(frozen=True)
class UnknownAction(InteractionError):
    action: str = ""
    code: str = "unknown_action"


@dataclass(frozen=True)
class WrongAction(InteractionError):
    attempted_action: MonsterAction = MonsterAction.FEED
    actual_mood: Mood = Mood.HUNGRY
    code: str = "wrong_action"


@dataclass(frozen=True)
class LimitReached(InteractionError):
    remaining: int = 0
    code: str = "limit_reached"


# ── Results ─────────────────────────────────────────────────


@dataclass(frozen=True)
class InteractionUpdate:
    """Fields the caller writes back in a single update."""

    mood: Mood
    last_mood_change_at: datetime
    next_mood_change_at: datetime
    total_xp: int
    level: int
    current_level_xp: int
    xp_gained: int
    leveled_up: bool


@dataclass(frozen=True)
class InteractionResult:
    """Either `update` or `error` is set.

    `state` is the decay recomputation done before judging the action; a
    caller holding a stale snapshot should persist it when state.changed,
    even if the interaction itself failed.
    """

    state: StateChangeResult
    update: Optional[InteractionUpdate] = None
    error: Optional[InteractionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class DailyPlayUpdate:
    daily_play_count: int
    last_play_date: str
    remaining: int
    xp: XPResult


@dataclass(frozen=True)
class DailyPlayResult:
    update: Optional[DailyPlayUpdate] = None
    error: Optional[LimitReached] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _parse_action(action: Union[str, MonsterAction]) -> Optional[MonsterAction]:
    try:
        return MonsterAction(action)
    except ValueError:
        return None


def resolve_interaction(
    monster: Monster,
    action: Union[str, MonsterAction],
    now: datetime,
    rng: Optional[random.Random] = None,
) -> InteractionResult:
    """Judge `action` against the monster's up-to-date mood.

    Decay is recomputed first so a stale read cannot make an action succeed
    against a mood the monster no longer has.
    """
    state = compute_current_state(monster, now, rng)

    if state.mood == Mood.HAPPY:
        return InteractionResult(state=state, error=AlreadySatisfied())

    parsed = _parse_action(action)
    if parsed is None:
        return InteractionResult(state=state, error=UnknownAction(action=str(action)))

    if MOOD_FIXED_BY[parsed] != state.mood:
        return InteractionResult(
            state=state,
            error=WrongAction(attempted_action=parsed, actual_mood=state.mood),
        )

    timing = initialize_timing(now, Mood.HAPPY, rng)
    reward = XP_PER_ACTION[parsed]
    xp = add_xp(monster.total_xp, reward)

    return InteractionResult(
        state=state,
        update=InteractionUpdate(
            mood=timing.mood,
            last_mood_change_at=timing.last_mood_change_at,
            next_mood_change_at=timing.next_mood_change_at,
            total_xp=xp.new_total_xp,
            level=xp.new_level,
            current_level_xp=xp.new_current_xp,
            xp_gained=reward,
            leveled_up=xp.leveled_up,
        ),
    )


def resolve_gift(monster: Monster) -> XPResult:
    """Gift XP. Supply of gifts is checked by the caller."""
    return add_xp(monster.total_xp, XP_PER_GIFT)


def utc_day(now: datetime) -> str:
    """YYYY-MM-DD of `now` in UTC."""
    return to_utc(now).date().isoformat()


def resolve_daily_play(
    monster: Monster,
    now: datetime,
    limit: int = DAILY_PLAY_LIMIT,
) -> DailyPlayResult:
    """Play for XP without touching mood, at most `limit` times per UTC day."""
    today = utc_day(now)
    count = monster.daily_play_count if monster.last_play_date == today else 0

    if count >= limit:
        return DailyPlayResult(error=LimitReached(remaining=0))

    count += 1
    return DailyPlayResult(
        update=DailyPlayUpdate(
            daily_play_count=count,
            last_play_date=today,
            remaining=limit - count,
            xp=add_xp(monster.total_xp, XP_PER_DAILY_PLAY),
        )
    )
