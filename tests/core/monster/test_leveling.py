"""Experience / leveling tests"""

import pytest

from src.core.monster.leveling import (
    MAX_LEVEL,
    XP_PER_ACTION,
    XP_PER_GIFT,
    add_xp,
    level_for_total_xp,
    progress_percent,
    total_xp_for_level,
    xp_required_for_level,
)
from src.core.monster.models import LevelInfo, MonsterAction


class TestCurve:
    def test_steps(self):
        assert xp_required_for_level(1) == 100
        assert xp_required_for_level(2) == 200
        assert xp_required_for_level(MAX_LEVEL - 1) == (MAX_LEVEL - 1) * 100
        assert xp_required_for_level(MAX_LEVEL) == 0

    def test_cumulative(self):
        assert total_xp_for_level(1) == 0
        assert total_xp_for_level(2) == 100
        assert total_xp_for_level(3) == 300
        assert total_xp_for_level(4) == 600


class TestLevelForTotalXP:
    def test_zero(self):
        assert level_for_total_xp(0) == LevelInfo(
            level=1, current_level_xp=0, xp_for_next_level=100
        )

    @pytest.mark.parametrize(
        "total, expected",
        [
            (99, (1, 99, 100)),
            (100, (2, 0, 200)),
            (150, (2, 50, 200)),
            (299, (2, 199, 200)),
            (300, (3, 0, 300)),
            (1000, (4, 400, 400)),
        ],
    )
    def test_thresholds(self, total, expected):
        info = level_for_total_xp(total)
        assert (info.level, info.current_level_xp, info.xp_for_next_level) == expected

    def test_max_level_terminal(self):
        cap = total_xp_for_level(MAX_LEVEL)
        info = level_for_total_xp(cap)
        assert info.level == MAX_LEVEL
        assert info.xp_for_next_level == 0
        assert info.current_level_xp == 0

        beyond = level_for_total_xp(cap + 500)
        assert beyond.level == MAX_LEVEL
        assert beyond.current_level_xp == 500

    def test_monotonic(self):
        previous = 1
        for total in range(0, total_xp_for_level(12), 37):
            level = level_for_total_xp(total).level
            assert level >= previous
            previous = level

    def test_current_below_next_until_max(self):
        for total in range(0, 5000, 13):
            info = level_for_total_xp(total)
            assert info.current_level_xp < info.xp_for_next_level

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            level_for_total_xp(-1)


class TestAddXP:
    def test_total_is_sum(self):
        for start in (0, 42, 999):
            for delta in (1, 15, 250):
                assert add_xp(start, delta).new_total_xp == start + delta

    def test_level_up_reported(self):
        result = add_xp(0, 150)
        assert result.new_total_xp == 150
        assert result.new_level == 2
        assert result.new_current_xp == 50
        assert result.xp_for_next_level == 200
        assert result.leveled_up is True
        assert result.old_level == 1

    def test_no_level_up(self):
        result = add_xp(10, XP_PER_ACTION[MonsterAction.FEED])
        assert result.new_level == 1
        assert result.leveled_up is False

    def test_multi_level_jump(self):
        result = add_xp(0, 600)
        assert result.new_level == 4
        assert result.leveled_up is True

    def test_not_capped_at_max_level(self):
        cap = total_xp_for_level(MAX_LEVEL)
        result = add_xp(cap, XP_PER_GIFT)
        assert result.new_total_xp == cap + XP_PER_GIFT
        assert result.new_level == MAX_LEVEL
        assert result.leveled_up is False

    @pytest.mark.parametrize("delta", [0, -5])
    def test_non_positive_delta_rejected(self, delta):
        with pytest.raises(ValueError):
            add_xp(100, delta)


class TestProgressPercent:
    def test_max_level(self):
        assert progress_percent(0, 0) == 100
        assert progress_percent(700, 0) == 100

    def test_basic(self):
        assert progress_percent(0, 100) == 0
        assert progress_percent(50, 200) == 25
        assert progress_percent(150, 300) == 50

    def test_rounds_half_up(self):
        assert progress_percent(1, 200) == 1  # 0.5%
        assert progress_percent(1, 3) == 33

    def test_clamped(self):
        assert progress_percent(500, 100) == 100
        assert progress_percent(-10, 100) == 0


class TestRewards:
    def test_reward_table(self):
        assert XP_PER_ACTION == {
            MonsterAction.FEED: 15,
            MonsterAction.SLEEP: 5,
            MonsterAction.PLAY: 25,
            MonsterAction.CUDDLE: 10,
        }
        assert XP_PER_GIFT == 50
