# src/yieldfarm/farm/accrual.py
from __future__ import annotations

"""Lazy reward settlement.

A pool's `acc_reward_per_score` is only brought up to date when something
touches the pool. Settling mints the pool's share of emission for the elapsed
heights into farm custody (bounded by the reward cap), mints the dev fee on top,
and spreads the minted pool reward over the pool's total score.

`project()` runs the exact same arithmetic with a read-only mint preview so
pending-reward views never drift from what a settlement would commit.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, List

from yieldfarm.farm.constants import PRECISION
from yieldfarm.farm.pools import Pool, PoolRegistry
from yieldfarm.farm.positions import Position
from yieldfarm.farm.schedule import RewardSchedule
from yieldfarm.ledger.tokens import RewardLedger
from yieldfarm.runtime.event_log import log_event
from yieldfarm.runtime.metrics import inc_counter

log = logging.getLogger("yieldfarm.accrual")


@dataclass(frozen=True)
class Settlement:
    pool_id: int
    from_height: int
    to_height: int
    reward: int
    minted: int
    acc_reward_per_score: int
    dev_minted: int = 0

    @property
    def clamped(self) -> bool:
        return self.minted < self.reward


class AccrualEngine:
    def __init__(
        self,
        *,
        schedule: RewardSchedule,
        base_rate_per_height: int,
        pools: PoolRegistry,
        reward_token: RewardLedger,
        farm_account: str,
        dev_address: Callable[[], str],
    ) -> None:
        self.schedule = schedule
        self.base_rate_per_height = int(base_rate_per_height)
        self.pools = pools
        self.reward_token = reward_token
        self.farm_account = str(farm_account)
        self._dev_address = dev_address

    def pool_reward(self, pool: Pool, from_height: int, to_height: int) -> int:
        """Emission owed to `pool` for [from_height, to_height) before any cap."""
        total_weight = self.pools.total_weight
        if total_weight <= 0 or pool.weight <= 0:
            return 0
        mult = self.schedule.multiplier_between(from_height, to_height)
        return mult * self.base_rate_per_height * pool.weight // total_weight

    def _advance(self, pool: Pool, height: int, mint: Callable[[int], int]) -> Settlement:
        h = int(height)
        last = pool.last_settled_height
        if h <= last:
            return Settlement(pool.pool_id, last, last, 0, 0, pool.acc_reward_per_score)
        if pool.total_score == 0:
            # nobody staked: emission for these heights is forfeited
            return Settlement(pool.pool_id, last, h, 0, 0, pool.acc_reward_per_score)

        reward = self.pool_reward(pool, last, h)
        minted = mint(reward) if reward > 0 else 0
        acc = pool.acc_reward_per_score + minted * PRECISION // pool.total_score
        return Settlement(pool.pool_id, last, h, reward, minted, acc)

    def project(self, pool: Pool, height: int) -> Settlement:
        """What `settle(pool, height)` would produce, without side effects."""
        return self._advance(pool, height, self.reward_token.mintable)

    def settle(self, pool: Pool, height: int) -> Settlement:
        def _mint(amount: int) -> int:
            return self.reward_token.mint_up_to(self.farm_account, amount, minter=self.farm_account)

        s = self._advance(pool, height, _mint)
        pool.acc_reward_per_score = s.acc_reward_per_score
        pool.last_settled_height = s.to_height
        if s.minted <= 0:
            if s.clamped:
                inc_counter("mint_clamped_total")
            return s

        dev_fee = self.schedule.dev_fee(s.minted, s.to_height)
        dev_minted = 0
        if dev_fee > 0:
            dev_minted = self.reward_token.mint_up_to(self._dev_address(), dev_fee, minter=self.farm_account)
        s = replace(s, dev_minted=dev_minted)

        inc_counter("settlements_total")
        inc_counter("reward_minted_total", s.minted + dev_minted)
        if s.clamped:
            inc_counter("mint_clamped_total")
        log_event(
            log,
            "pool_settled",
            pool_id=s.pool_id,
            from_height=s.from_height,
            to_height=s.to_height,
            reward=s.reward,
            minted=s.minted,
            dev_minted=dev_minted,
            acc_reward_per_score=s.acc_reward_per_score,
        )
        return s

    def settle_all(self, height: int) -> List[Settlement]:
        # index order fixes which pool drains the remaining cap first
        return [self.settle(pool, height) for pool in self.pools]

    def pending_reward(self, pool: Pool, position: Position, height: int) -> int:
        acc = self.project(pool, height).acc_reward_per_score
        return position.accrued(acc) - position.reward_debt
