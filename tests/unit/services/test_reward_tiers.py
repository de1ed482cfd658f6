import pytest

from udao_mining.services.reward_scheduler import (
    MAX_SUPPLY_UNITS,
    REWARD_TIERS,
    reward_for_tier,
    supply_units,
)
from udao_mining.utils.assets import Asset, Symbol

UDAO = Symbol("UDAO", 8)
UNIT = 100000000


def units(n, extra_raw=0):
    return Asset(n * UNIT + extra_raw, UDAO)


class TestSupplyUnits:
    def test_whole_tokens(self):
        assert supply_units(units(10500000)) == 10500000

    def test_fraction_truncated(self):
        assert supply_units(units(10500000, UNIT - 1)) == 10500000


HALVING_LADDER = [
    (10500000, 5000000000),
    (15750000, 2500000000),
    (18375000, 1250000000),
    (19687500, 625000000),
    (20343750, 312500000),
    (20671875, 156250000),
    (20835938, 78125000),
    (20917969, 39062500),
    (20958984, 19531250),
    (20979492, 9765625),
    (20989746, 4882813),
    (20994873, 2441406),
    (20997437, 1220703),
    (20998718, 610352),
    (20999359, 305176),
    (20999680, 152588),
    (20999840, 76294),
    (20999920, 38147),
    (20999960, 19073),
    (20999980, 9537),
    (20999990, 4768),
    (20999995, 2384),
    (20999998, 1192),
    (20999999, 596),
]


class TestRewardForTier:
    def test_table_has_expected_shape(self):
        assert len(REWARD_TIERS) == 24
        bounds = [bound for bound, _ in REWARD_TIERS]
        rewards = [reward for _, reward in REWARD_TIERS]
        assert bounds == sorted(bounds)
        assert rewards == sorted(rewards, reverse=True)
        assert len(set(rewards)) == len(rewards)

    @pytest.mark.parametrize("bound, reward", HALVING_LADDER)
    def test_halving_ladder(self, bound, reward):
        assert reward_for_tier(units(bound)).amount == reward
        assert reward_for_tier(units(bound, UNIT - 1)).amount == reward

    @pytest.mark.parametrize("index", range(len(HALVING_LADDER) - 1))
    def test_ladder_steps_down_past_each_bound(self, index):
        bound, _ = HALVING_LADDER[index]
        assert reward_for_tier(units(bound + 1)).amount == HALVING_LADDER[index + 1][1]

    def test_genesis_reward(self):
        assert reward_for_tier(Asset(0, UDAO)) == Asset(5000000000, UDAO)

    def test_first_boundary_is_inclusive(self):
        assert reward_for_tier(units(10500000)).amount == 5000000000
        assert reward_for_tier(units(10500001)).amount == 2500000000

    def test_fraction_above_boundary_stays_in_tier(self):
        assert reward_for_tier(units(10500000, UNIT - 1)).amount == 5000000000

    def test_last_tier_below_cap(self):
        assert reward_for_tier(units(20999999)).amount == 596
        assert reward_for_tier(units(20999999, UNIT - 1)).amount == 596

    def test_fully_mined(self):
        assert reward_for_tier(units(MAX_SUPPLY_UNITS)).amount == 0
        assert reward_for_tier(units(MAX_SUPPLY_UNITS + 1000)).amount == 0

    def test_reward_carries_reward_symbol(self):
        assert reward_for_tier(units(1)).symbol == UDAO

    def test_monotonic_non_increasing(self):
        samples = [0, 1, 5250000, 10500000, 10500001, 15750000, 19000000, 20999000, 20999998, 20999999, 21000000]
        rewards = [reward_for_tier(units(s)).amount for s in samples]
        for earlier, later in zip(rewards, rewards[1:]):
            assert earlier >= later
