"""Lazy mood decay

Each monster carries its own deadline (next_mood_change_at). Nothing ticks in
the background: the deadline is compared against the clock whenever the
monster is read, and a due monster gets a new mood plus a freshly armed
deadline. The caller persists the result only when changed is True.

All pure functions. `now` and the random source are always passed in.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Optional

from src.core.monster.models import (
    Monster,
    Mood,
    StateChangeResult,
    Timestamp,
    TimingFields,
)

MIN_MOOD_CHANGE_INTERVAL_MS = 60 * 1000
MAX_MOOD_CHANGE_INTERVAL_MS = 180 * 1000

# happy is only reachable through an interaction
DECAY_MOODS: tuple[Mood, ...] = (Mood.SAD, Mood.ANGRY, Mood.HUNGRY, Mood.SLEEPY)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: Timestamp) -> Optional[datetime]:
    """Normalize a stored timestamp to an aware UTC datetime.

    Naive datetimes are read as UTC, ISO-8601 strings are parsed.
    Anything else (None, garbage) yields None.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def schedule_next_change(
    now: datetime, rng: Optional[random.Random] = None
) -> datetime:
    """now + uniform(60s, 180s), drawn in whole milliseconds."""
    source = rng or random
    interval_ms = source.randint(
        MIN_MOOD_CHANGE_INTERVAL_MS, MAX_MOOD_CHANGE_INTERVAL_MS
    )
    return to_utc(now) + timedelta(milliseconds=interval_ms)


def pick_decay_mood(current_mood: Mood, rng: Optional[random.Random] = None) -> Mood:
    """Random negative mood, never happy and never the current one."""
    source = rng or random
    candidates = [m for m in DECAY_MOODS if m != current_mood]
    return source.choice(candidates)


def compute_current_state(
    monster: Monster,
    now: datetime,
    rng: Optional[random.Random] = None,
) -> StateChangeResult:
    """Decide whether the monster's mood should have changed by `now`.

    1. No usable deadline (legacy row): keep the mood, arm a timer.
    2. Deadline reached: decay to a new mood, arm a new timer.
    3. Otherwise: nothing to do.
    """
    now = to_utc(now)
    deadline = to_utc(monster.next_mood_change_at)

    if deadline is None:
        return StateChangeResult(
            changed=True,
            mood=Mood(monster.mood),
            next_mood_change_at=schedule_next_change(now, rng),
            last_mood_change_at=now,
        )

    if now >= deadline:
        return StateChangeResult(
            changed=True,
            mood=pick_decay_mood(Mood(monster.mood), rng),
            next_mood_change_at=schedule_next_change(now, rng),
            last_mood_change_at=now,
        )

    return StateChangeResult(
        changed=False,
        mood=Mood(monster.mood),
        next_mood_change_at=deadline,
    )


def initialize_timing(
    now: datetime,
    initial_mood: Mood = Mood.HAPPY,
    rng: Optional[random.Random] = None,
) -> TimingFields:
    """Timing fields for a new monster (or one that was just made happy)."""
    now = to_utc(now)
    return TimingFields(
        mood=initial_mood,
        last_mood_change_at=now,
        next_mood_change_at=schedule_next_change(now, rng),
    )


def time_until_next_change(monster: Monster, now: datetime) -> int:
    """Milliseconds left before the next decay check fires. 0 if overdue."""
    deadline = to_utc(monster.next_mood_change_at)
    if deadline is None:
        return 0
    remaining = deadline - to_utc(now)
    return max(0, int(remaining.total_seconds() * 1000))
