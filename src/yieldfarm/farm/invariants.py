from __future__ import annotations

"""Farm state invariants.

The farm mutates pools and positions in place; this module is the single place
that recomputes the cross-record sums those mutations must preserve:

  - each pool's total_score equals the sum of its positions' scores
  - amounts and scores are never negative
  - the farm custodies at least the staked amount of every pool's asset
  - the reward ledger never exceeds its cap
"""

from typing import TYPE_CHECKING, Dict, List

from yieldfarm.farm.errors import FarmError

if TYPE_CHECKING:  # pragma: no cover
    from yieldfarm.farm.engine import Farm


class InvariantViolation(FarmError):
    pass


def collect_violations(farm: "Farm") -> List[str]:
    problems: List[str] = []
    score_sums: Dict[int, int] = {}
    amount_sums: Dict[int, int] = {}

    for pos in farm.positions:
        if pos.amount < 0:
            problems.append(f"negative_amount:{pos.pool_id}:{pos.holder}")
        if pos.score < 0:
            problems.append(f"negative_score:{pos.pool_id}:{pos.holder}")
        score_sums[pos.pool_id] = score_sums.get(pos.pool_id, 0) + pos.score
        amount_sums[pos.pool_id] = amount_sums.get(pos.pool_id, 0) + pos.amount

    for pool in farm.pools:
        expected = score_sums.get(pool.pool_id, 0)
        if pool.total_score != expected:
            problems.append(f"total_score_mismatch:{pool.pool_id}:{pool.total_score}!={expected}")
        held = farm.staked_token(pool.pool_id).balance_of(farm.account_id)
        staked = amount_sums.get(pool.pool_id, 0)
        if held < staked:
            problems.append(f"custody_shortfall:{pool.pool_id}:{held}<{staked}")

    token = farm.reward_token
    if token.total_supply > token.cap:
        problems.append(f"cap_exceeded:{token.total_supply}>{token.cap}")

    return problems


def check_farm_invariants(farm: "Farm") -> None:
    """Raises InvariantViolation listing every broken invariant."""
    problems = collect_violations(farm)
    if problems:
        raise InvariantViolation("invariant_violation", "farm_state_inconsistent", {"problems": problems})


__all__ = ["InvariantViolation", "check_farm_invariants", "collect_violations"]
