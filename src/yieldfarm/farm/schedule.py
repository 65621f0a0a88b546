# src/yieldfarm/farm/schedule.py
from __future__ import annotations

"""Emission schedule: bonus multipliers and dev fee divisors as pure functions of height.

All ranges are half-open `[from_height, to_height)`: settling a pool from its
last settled height `a` up to `b` pays for heights a, a+1, ..., b-1.
"""

from dataclasses import dataclass
from typing import List, Tuple

from yieldfarm.farm.constants import (
    BONUS_STAGE_MULTIPLIERS,
    BONUS_STAGES,
    DEV_FEE_STAGE_DIVISORS,
    POST_BONUS_MULTIPLIER,
    POST_DEV_BONUS_DIVISOR,
)


def _stage_bounds(start: int, end: int) -> Tuple[int, ...]:
    """Return (start, b2, b3, b4, end) for four equal stages of [start, end)."""
    quarter = (int(end) - int(start)) // BONUS_STAGES
    return tuple(int(start) + quarter * i for i in range(BONUS_STAGES)) + (int(end),)


@dataclass(frozen=True)
class RewardSchedule:
    start_height: int
    bonus_end_height: int
    dev_bonus_end_height: int

    def __post_init__(self) -> None:
        if int(self.start_height) < 0:
            raise ValueError(f"start_height must be >= 0; got: {self.start_height}")
        if int(self.bonus_end_height) < int(self.start_height):
            raise ValueError("bonus_end_height must be >= start_height")
        if int(self.dev_bonus_end_height) < int(self.start_height):
            raise ValueError("dev_bonus_end_height must be >= start_height")

    # ---- stage boundaries ----

    def bonus_stage_heights(self) -> Tuple[int, ...]:
        return _stage_bounds(self.start_height, self.bonus_end_height)

    def dev_bonus_stage_heights(self) -> Tuple[int, ...]:
        return _stage_bounds(self.start_height, self.dev_bonus_end_height)

    def _emission_segments(self) -> List[Tuple[int, int, int]]:
        bounds = self.bonus_stage_heights()
        segs = [(bounds[i], bounds[i + 1], BONUS_STAGE_MULTIPLIERS[i]) for i in range(BONUS_STAGES)]
        return [s for s in segs if s[1] > s[0]]

    # ---- emission ----

    def emission_multiplier(self, height: int) -> int:
        """Emission multiplier in force at a single height."""
        h = int(height)
        if h < int(self.start_height):
            return 0
        for lo, hi, mult in self._emission_segments():
            if lo <= h < hi:
                return mult
        return POST_BONUS_MULTIPLIER

    def multiplier_between(self, from_height: int, to_height: int) -> int:
        """Sum of per-height emission multipliers over [from_height, to_height).

        Each stage contributes (heights inside the stage) x (stage multiplier);
        nothing is averaged across a boundary.
        """
        lo = max(int(from_height), int(self.start_height))
        hi = int(to_height)
        if hi <= lo:
            return 0

        total = 0
        for seg_lo, seg_hi, mult in self._emission_segments():
            a = max(lo, seg_lo)
            b = min(hi, seg_hi)
            if b > a:
                total += (b - a) * mult

        tail = max(lo, int(self.bonus_end_height))
        if hi > tail:
            total += (hi - tail) * POST_BONUS_MULTIPLIER
        return total

    # ---- dev fee ----

    def dev_fee_divisor(self, height: int) -> int:
        """Dev fee at `height` is 1/divisor of the settled pool reward."""
        h = int(height)
        bounds = self.dev_bonus_stage_heights()
        if h >= bounds[-1]:
            return POST_DEV_BONUS_DIVISOR
        for i in range(BONUS_STAGES - 1, 0, -1):
            if h >= bounds[i]:
                return DEV_FEE_STAGE_DIVISORS[i]
        return DEV_FEE_STAGE_DIVISORS[0]

    def dev_fee(self, amount: int, height: int) -> int:
        return int(amount) // self.dev_fee_divisor(height)
