"""Interaction resolver tests"""

import random
from datetime import datetime, timedelta, timezone

import pytest

from src.core.monster.decay import DECAY_MOODS
from src.core.monster.interaction import (
    DAILY_PLAY_LIMIT,
    REQUIRED_ACTION,
    AlreadySatisfied,
    LimitReached,
    UnknownAction,
    WrongAction,
    resolve_daily_play,
    resolve_gift,
    resolve_interaction,
    utc_day,
)
from src.core.monster.leveling import (
    XP_PER_ACTION,
    XP_PER_DAILY_PLAY,
    XP_PER_GIFT,
    level_for_total_xp,
)
from src.core.monster.models import Monster, MonsterAction, Mood

T0 = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _make_monster(**kwargs) -> Monster:
    """Monster factory; timer not due by default."""
    defaults = {
        "monster_id": "monster-001",
        "owner_id": "owner-001",
        "mood": Mood.HUNGRY,
        "last_mood_change_at": T0 - timedelta(minutes=1),
        "next_mood_change_at": T0 + timedelta(minutes=1),
    }
    defaults.update(kwargs)
    return Monster(**defaults)


class TestRequiredActionTable:
    def test_mapping(self):
        assert REQUIRED_ACTION == {
            Mood.HUNGRY: MonsterAction.FEED,
            Mood.SLEEPY: MonsterAction.SLEEP,
            Mood.SAD: MonsterAction.PLAY,
            Mood.ANGRY: MonsterAction.CUDDLE,
        }
        assert Mood.HAPPY not in REQUIRED_ACTION


class TestResolveInteraction:
    def test_feed_hungry_succeeds(self):
        monster = _make_monster(mood=Mood.HUNGRY, total_xp=40)
        result = resolve_interaction(monster, "feed", T0, random.Random(1))

        assert result.ok
        assert result.error is None
        assert result.update.mood == Mood.HAPPY
        assert result.update.next_mood_change_at > T0
        assert result.update.last_mood_change_at == T0
        assert result.update.total_xp == 40 + XP_PER_ACTION[MonsterAction.FEED]
        assert result.update.xp_gained == XP_PER_ACTION[MonsterAction.FEED]

    @pytest.mark.parametrize("mood, action", list(REQUIRED_ACTION.items()))
    def test_every_matching_action_makes_happy(self, mood, action):
        result = resolve_interaction(_make_monster(mood=mood), action.value, T0)
        assert result.ok
        assert result.update.mood == Mood.HAPPY

    def test_cuddle_angry_from_zero(self):
        """Angry monster with no XP gets cuddled."""
        monster = _make_monster(mood=Mood.ANGRY, total_xp=0)
        result = resolve_interaction(monster, MonsterAction.CUDDLE, T0)
        reward = XP_PER_ACTION[MonsterAction.CUDDLE]

        assert result.ok
        assert result.update.mood == Mood.HAPPY
        assert result.update.total_xp == reward
        info = level_for_total_xp(reward)
        assert result.update.level == info.level
        assert result.update.current_level_xp == info.current_level_xp

    def test_wrong_action(self):
        monster = _make_monster(mood=Mood.HUNGRY, total_xp=40)
        result = resolve_interaction(monster, "play", T0)

        assert not result.ok
        assert result.update is None
        assert result.error == WrongAction(
            attempted_action=MonsterAction.PLAY, actual_mood=Mood.HUNGRY
        )
        assert result.error.code == "wrong_action"
        # snapshot untouched
        assert monster.mood == Mood.HUNGRY
        assert monster.total_xp == 40

    @pytest.mark.parametrize("action", ["feed", "sleep", "play", "cuddle", "dance"])
    def test_happy_rejects_everything(self, action):
        result = resolve_interaction(_make_monster(mood=Mood.HAPPY), action, T0)
        assert isinstance(result.error, AlreadySatisfied)
        assert result.error.code == "already_satisfied"

    def test_unknown_action(self):
        result = resolve_interaction(_make_monster(mood=Mood.SAD), "dance", T0)
        assert result.error == UnknownAction(action="dance")

    def test_stale_snapshot_is_recomputed_first(self):
        """Monster read as hungry, but its timer fired since: feed must not
        succeed against the mood it no longer has."""
        monster = _make_monster(
            mood=Mood.HUNGRY, next_mood_change_at=T0 - timedelta(seconds=5)
        )
        for seed in range(20):
            result = resolve_interaction(monster, "feed", T0, random.Random(seed))
            assert result.state.changed is True
            assert result.state.mood != Mood.HUNGRY
            assert isinstance(result.error, WrongAction)
            assert result.error.actual_mood == result.state.mood

    def test_stale_snapshot_matching_new_mood_succeeds(self):
        monster = _make_monster(
            mood=Mood.HUNGRY, next_mood_change_at=T0 - timedelta(seconds=5)
        )
        rng = random.Random(8)
        decayed = resolve_interaction(monster, "feed", T0, random.Random(8)).state.mood
        action = REQUIRED_ACTION[decayed]
        result = resolve_interaction(monster, action, T0, rng)
        assert result.ok
        assert result.update.mood == Mood.HAPPY

    def test_legacy_record_without_timer(self):
        monster = _make_monster(mood=Mood.SLEEPY, next_mood_change_at=None)
        result = resolve_interaction(monster, "sleep", T0)
        assert result.state.changed is True
        assert result.ok

    def test_level_up_flag(self):
        monster = _make_monster(mood=Mood.SAD, total_xp=90)
        result = resolve_interaction(monster, "play", T0)
        assert result.update.total_xp == 115
        assert result.update.level == 2
        assert result.update.leveled_up is True

    def test_decay_never_reaches_happy(self):
        rng = random.Random(99)
        now = T0
        monster = _make_monster(mood=Mood.HAPPY, next_mood_change_at=now)
        for _ in range(100):
            result = resolve_interaction(monster, "feed", now, rng)
            assert result.state.mood in DECAY_MOODS
            monster = _make_monster(
                mood=result.state.mood, next_mood_change_at=result.state.next_mood_change_at
            )
            now = result.state.next_mood_change_at


class TestResolveGift:
    def test_gift_adds_xp_only(self):
        monster = _make_monster(mood=Mood.ANGRY, total_xp=60)
        xp = resolve_gift(monster)
        assert xp.new_total_xp == 60 + XP_PER_GIFT
        assert xp.new_level == 2
        assert xp.leveled_up is True
        assert monster.mood == Mood.ANGRY


class TestResolveDailyPlay:
    def test_first_play_of_day(self):
        monster = _make_monster(total_xp=0)
        result = resolve_daily_play(monster, T0)
        assert result.ok
        assert result.update.daily_play_count == 1
        assert result.update.last_play_date == "2024-06-01"
        assert result.update.remaining == DAILY_PLAY_LIMIT - 1
        assert result.update.xp.new_total_xp == XP_PER_DAILY_PLAY

    def test_limit_reached(self):
        monster = _make_monster(
            daily_play_count=DAILY_PLAY_LIMIT, last_play_date="2024-06-01"
        )
        result = resolve_daily_play(monster, T0)
        assert not result.ok
        assert result.update is None
        assert result.error == LimitReached(remaining=0)

    def test_last_play_allowed(self):
        monster = _make_monster(
            daily_play_count=DAILY_PLAY_LIMIT - 1, last_play_date="2024-06-01"
        )
        result = resolve_daily_play(monster, T0)
        assert result.ok
        assert result.update.remaining == 0

    def test_counter_resets_on_new_utc_day(self):
        monster = _make_monster(
            daily_play_count=DAILY_PLAY_LIMIT, last_play_date="2024-05-31"
        )
        result = resolve_daily_play(monster, T0)
        assert result.ok
        assert result.update.daily_play_count == 1

    def test_day_boundary_is_utc(self):
        late_evening_elsewhere = datetime(
            2024, 6, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5))
        )
        assert utc_day(late_evening_elsewhere) == "2024-06-02"

    def test_custom_limit(self):
        monster = _make_monster(daily_play_count=1, last_play_date="2024-06-01")
        assert not resolve_daily_play(monster, T0, limit=1).ok

    def test_mood_not_touched(self):
        monster = _make_monster(mood=Mood.SAD)
        result = resolve_daily_play(monster, T0)
        assert not hasattr(result.update, "mood")
        assert monster.mood == Mood.SAD
