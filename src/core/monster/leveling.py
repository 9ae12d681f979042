"""Experience and leveling

Linear curve: going from level n to n+1 costs n * 100 XP.
    level 1 -> 2: 100
    level 2 -> 3: 200   (300 total)
    level 3 -> 4: 300   (600 total)
total_xp is the source of truth; level and current_level_xp are derived.
"""

import math

from src.core.monster.models import LevelInfo, MonsterAction, XPResult

MAX_LEVEL = 50
XP_PER_LEVEL_STEP = 100

# Reward table. Opaque positive deltas as far as the calculator is concerned.
XP_PER_ACTION: dict[MonsterAction, int] = {
    MonsterAction.FEED: 15,
    MonsterAction.SLEEP: 5,
    MonsterAction.PLAY: 25,
    MonsterAction.CUDDLE: 10,
}
XP_PER_GIFT = 50
XP_PER_DAILY_PLAY = 10


def xp_required_for_level(level: int) -> int:
    """XP needed to leave `level`. 0 at MAX_LEVEL."""
    if level >= MAX_LEVEL:
        return 0
    return level * XP_PER_LEVEL_STEP


def total_xp_for_level(level: int) -> int:
    """Cumulative XP needed to reach `level` from level 1."""
    return sum(xp_required_for_level(n) for n in range(1, level))


def level_for_total_xp(total_xp: int) -> LevelInfo:
    if total_xp < 0:
        raise ValueError(f"total_xp must be >= 0, got {total_xp}")

    level = 1
    remaining = total_xp
    while level < MAX_LEVEL:
        required = xp_required_for_level(level)
        if remaining < required:
            break
        remaining -= required
        level += 1

    return LevelInfo(
        level=level,
        current_level_xp=remaining,
        xp_for_next_level=xp_required_for_level(level),
    )


def add_xp(current_total_xp: int, delta: int) -> XPResult:
    """Grant `delta` XP and re-derive the level.

    Total XP is never capped, so past MAX_LEVEL the overflow keeps
    accumulating in current_level_xp.
    """
    if delta <= 0:
        raise ValueError(f"XP delta must be positive, got {delta}")

    old = level_for_total_xp(current_total_xp)
    new_total = current_total_xp + delta
    new = level_for_total_xp(new_total)

    return XPResult(
        new_total_xp=new_total,
        new_level=new.level,
        new_current_xp=new.current_level_xp,
        xp_for_next_level=new.xp_for_next_level,
        leveled_up=new.level > old.level,
        old_level=old.level,
    )


def progress_percent(current_level_xp: int, xp_for_next_level: int) -> int:
    """Progress bar value 0..100. Max level reads as 100."""
    if xp_for_next_level == 0:
        return 100
    # half-up, not banker's rounding
    percent = math.floor(100 * current_level_xp / xp_for_next_level + 0.5)
    return max(0, min(100, percent))
