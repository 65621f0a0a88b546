from __future__ import annotations

import pytest

from yieldfarm.farm.constants import PRECISION
from yieldfarm.farm.early_bird import EarlyBirdConfig, apply_multiplier, early_bird_multiplier

POOL_A = EarlyBirdConfig(min_qualifying_amount=0, max_multiplier=33, grace_height=100_000, halving_period=10)
POOL_B = EarlyBirdConfig(min_qualifying_amount=0, max_multiplier=17, grace_height=200_000, halving_period=4)


@pytest.mark.parametrize("height", [0, 1000, 99_999, 100_000])
def test_full_bonus_through_grace(height):
    assert early_bird_multiplier(POOL_A, height) == 33 * PRECISION


@pytest.mark.parametrize("height", [0, 1000, 99_999, 199_999, 200_000])
def test_full_bonus_through_grace_second_pool(height):
    assert early_bird_multiplier(POOL_B, height) == 17 * PRECISION


def test_bonus_halves_at_each_period_boundary():
    expected = [
        17_000_000_000_000,
        9_000_000_000_000,
        5_000_000_000_000,
        3_000_000_000_000,
        2_000_000_000_000,
        1_500_000_000_000,
        1_250_000_000_000,
        1_125_000_000_000,
        1_062_500_000_000,
    ]
    got_a = [early_bird_multiplier(POOL_A, 100_000 + 10 * k) for k in range(1, 10)]
    got_b = [early_bird_multiplier(POOL_B, 200_000 + 4 * k) for k in range(1, 9)]
    assert got_a == expected
    assert got_b == expected[1:]


def test_divisor_interpolates_linearly_between_halvings():
    assert early_bird_multiplier(POOL_A, 100_001) == 30_090_909_090_909
    assert early_bird_multiplier(POOL_A, 100_002) == 27_666_666_666_666
    assert early_bird_multiplier(POOL_A, 100_005) == 22_333_333_333_333
    assert early_bird_multiplier(POOL_A, 100_008) == 18_777_777_777_777
    assert early_bird_multiplier(POOL_A, 100_011) == 15_545_454_545_454
    assert early_bird_multiplier(POOL_A, 100_012) == 14_333_333_333_333
    assert early_bird_multiplier(POOL_A, 100_015) == 11_666_666_666_666
    assert early_bird_multiplier(POOL_A, 100_016) == 11_000_000_000_000
    assert early_bird_multiplier(POOL_A, 100_018) == 9_888_888_888_888

    assert early_bird_multiplier(POOL_B, 200_001) == 13_800_000_000_000
    assert early_bird_multiplier(POOL_B, 200_002) == 11_666_666_666_666
    assert early_bird_multiplier(POOL_B, 200_003) == 10_142_857_142_857
    assert early_bird_multiplier(POOL_B, 200_005) == 7_400_000_000_000
    assert early_bird_multiplier(POOL_B, 200_006) == 6_333_333_333_333
    assert early_bird_multiplier(POOL_B, 200_007) == 5_571_428_571_428
    assert early_bird_multiplier(POOL_B, 200_008) == 5_000_000_000_000


def test_bonus_flatlines_to_one():
    assert early_bird_multiplier(POOL_A, 101_200) == PRECISION
    assert early_bird_multiplier(POOL_A, 200_000) == PRECISION
    assert early_bird_multiplier(POOL_B, 200_480) == PRECISION
    assert early_bird_multiplier(POOL_B, 300_000) == PRECISION
    assert early_bird_multiplier(POOL_A, 10**12) == PRECISION


def test_multiplier_never_increases_with_height():
    prev = early_bird_multiplier(POOL_B, 199_990)
    for h in range(199_991, 200_200):
        cur = early_bird_multiplier(POOL_B, h)
        assert PRECISION <= cur <= prev
        prev = cur


def test_no_bonus_pool_is_always_one():
    cfg = EarlyBirdConfig()
    assert early_bird_multiplier(cfg, 0) == PRECISION
    assert early_bird_multiplier(cfg, 12345) == PRECISION


def test_apply_multiplier_truncates():
    assert apply_multiplier(20, 2 * PRECISION) == 40
    assert apply_multiplier(3, 30_090_909_090_909) == 90
    assert apply_multiplier(0, 33 * PRECISION) == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_multiplier": 0},
        {"halving_period": 0},
        {"grace_height": -1},
        {"min_qualifying_amount": -5},
    ],
)
def test_config_validation(kwargs):
    with pytest.raises(ValueError):
        EarlyBirdConfig(**kwargs)
