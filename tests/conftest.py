from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

# Ensure local "src/" takes precedence over any globally-installed "yieldfarm" package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)

from yieldfarm.farm.clock import ManualClock  # noqa: E402
from yieldfarm.farm.engine import Farm  # noqa: E402
from yieldfarm.ledger.tokens import CappedRewardToken, InMemoryToken  # noqa: E402
from yieldfarm.runtime import metrics  # noqa: E402

OWNER = "alice"
HOLDERS = ("alice", "bob", "carol")


@dataclass
class FarmHarness:
    farm: Farm
    clock: ManualClock
    reward: CappedRewardToken
    lp: InMemoryToken
    lp2: InMemoryToken

    def at(self, height: int) -> Farm:
        self.clock.advance_to(height)
        return self.farm

    def approve_all(self, token: InMemoryToken, accounts=HOLDERS, amount: int = 1000) -> None:
        for acct in accounts:
            token.approve(acct, self.farm.account_id, amount)


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def make_farm():
    """Build a farm owned by alice; lp/lp2 hold 1000 units each for alice, bob and carol."""

    def _make(rate: int, start: int, bonus_end: int, dev_end: int, *, premint: int = 0, height: int = 0):
        clock = ManualClock(height)
        reward = CappedRewardToken("REWARD", owner=OWNER)
        if premint:
            reward.mint("minter", premint, minter=OWNER)
        farm = Farm(
            reward_token=reward,
            dev_address="dev",
            base_rate_per_height=rate,
            start_height=start,
            bonus_end_height=bonus_end,
            dev_bonus_end_height=dev_end,
            owner=OWNER,
            clock=clock,
            strict_invariants=True,
        )
        reward.grant_minter(OWNER, farm.account_id)
        lp = InMemoryToken("LP", balances={a: 1000 for a in HOLDERS})
        lp2 = InMemoryToken("LP2", balances={a: 1000 for a in HOLDERS})
        return FarmHarness(farm=farm, clock=clock, reward=reward, lp=lp, lp2=lp2)

    return _make
