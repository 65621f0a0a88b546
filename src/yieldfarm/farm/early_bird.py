from __future__ import annotations

from dataclasses import dataclass

from yieldfarm.farm.constants import PRECISION


@dataclass(frozen=True)
class EarlyBirdConfig:
    """Per-pool early-bird bonus.

    `max_multiplier` is a whole-number multiple (e.g. 33 for 33x); every
    computed multiplier is scaled by PRECISION.
    """

    min_qualifying_amount: int = 0
    max_multiplier: int = 1
    grace_height: int = 0
    halving_period: int = 1

    def __post_init__(self) -> None:
        if int(self.min_qualifying_amount) < 0:
            raise ValueError("min_qualifying_amount must be >= 0")
        if int(self.max_multiplier) < 1:
            raise ValueError("max_multiplier must be >= 1")
        if int(self.grace_height) < 0:
            raise ValueError("grace_height must be >= 0")
        if int(self.halving_period) < 1:
            raise ValueError("halving_period must be >= 1")

    @property
    def max_multiplier_scaled(self) -> int:
        return int(self.max_multiplier) * PRECISION


def early_bird_multiplier(cfg: EarlyBirdConfig, height: int) -> int:
    """Staking-power multiplier (scaled by PRECISION) for a deposit at `height`.

    Full bonus through the grace height. Afterwards the bonus above 1x is
    divided by 2**k * (1 + r/halving), where k counts whole halving periods
    since grace and r is the remainder, so the divisor grows linearly between
    halvings. The quotient is computed exactly and truncated once.
    """
    h = int(height)
    grace = int(cfg.grace_height)
    if h <= grace:
        return cfg.max_multiplier_scaled

    halving = int(cfg.halving_period)
    offset = h - grace
    periods = offset // halving
    remainder = offset % halving

    numerator = (int(cfg.max_multiplier) - 1) * PRECISION * halving
    # 2**periods outgrows the numerator long before periods gets large; the
    # bonus has truncated to zero by then.
    if periods >= numerator.bit_length():
        return PRECISION

    bonus = numerator // ((halving + remainder) << periods)
    return PRECISION + bonus


def apply_multiplier(amount: int, multiplier: int) -> int:
    """Score contribution of `amount` at a scaled multiplier (truncated)."""
    return int(amount) * int(multiplier) // PRECISION
