from __future__ import annotations

import pytest

from yieldfarm.farm.errors import DuplicateStakedAsset, ReentrantCall
from yieldfarm.farm.invariants import InvariantViolation, check_farm_invariants, collect_violations
from yieldfarm.farm.positions import PositionLedger
from yieldfarm.ledger.tokens import InMemoryToken, TokenError
from yieldfarm.runtime import metrics


def _state(h):
    farm = h.farm
    pools = [p.to_json() for p in farm.pools]
    positions = sorted((p.pool_id, p.holder, p.amount, p.score, p.reward_debt) for p in farm.positions)
    return pools, positions, h.reward.snapshot(), h.lp.snapshot()


def test_failed_transfer_rolls_back_settlement_and_mint(make_farm):
    h = make_farm(50, 300, 10_000, 10_000)
    farm = h.farm
    farm.add_pool("alice", 100, h.lp)
    h.approve_all(h.lp, ["alice", "bob"])
    h.at(310).deposit("alice", 0, 10)

    h.at(320)
    # allowance covers the deposit, the balance does not
    h.lp.approve("bob", farm.account_id, 5000)
    before = _state(h)
    with pytest.raises(TokenError) as ei:
        farm.deposit("bob", 0, 2000)
    assert ei.value.code == "insufficient_balance"
    assert _state(h) == before
    assert farm.pool(0).last_settled_height == 310
    assert metrics.snapshot()["counters"]["operations_rolled_back_total"] == 1


def test_missing_allowance_leaves_no_trace(make_farm):
    h = make_farm(50, 300, 10_000, 10_000)
    farm = h.farm
    farm.add_pool("alice", 100, h.lp)
    h.approve_all(h.lp, ["alice"])
    h.at(310).deposit("alice", 0, 10)

    h.at(330)
    before = _state(h)
    with pytest.raises(TokenError) as ei:
        farm.deposit("carol", 0, 10)
    assert ei.value.code == "insufficient_allowance"
    assert _state(h) == before
    assert farm.pending_reward(0, "alice") == 20_000


class _ReentrantToken(InMemoryToken):
    """Staked asset whose transfer_from calls back into the farm."""

    farm = None

    def transfer_from(self, spender, owner, to, amount):
        self.farm.deposit(owner, 0, 1)
        super().transfer_from(spender, owner, to, amount)


def test_nested_operation_rejected(make_farm):
    h = make_farm(50, 300, 10_000, 10_000)
    farm = h.farm
    evil = _ReentrantToken("EVIL", balances={"bob": 100})
    evil.farm = farm
    evil.approve("bob", farm.account_id, 100)
    farm.add_pool("alice", 100, evil)

    with pytest.raises(ReentrantCall):
        farm.deposit("bob", 0, 10)
    assert farm.position(0, "bob").amount == 0
    assert farm.pool(0).total_score == 0
    assert evil.balance_of("bob") == 100

    # the guard is released after the failure
    farm.withdraw("bob", 0, 0)


def test_rejected_add_pool_leaves_registry_untouched(make_farm):
    h = make_farm(50, 300, 10_000, 10_000)
    farm = h.farm
    farm.add_pool("alice", 100, h.lp)
    with pytest.raises(DuplicateStakedAsset):
        farm.add_pool("alice", 50, h.lp)
    assert farm.pool_length() == 1
    assert farm.total_weight == 100


def test_invariants_hold_through_a_full_cycle(make_farm):
    h = make_farm(50, 300, 10_000, 10_000)
    farm = h.farm
    farm.add_pool("alice", 100, h.lp, 20, 2, 100_000, 1)
    farm.add_pool("alice", 50, h.lp2)
    h.approve_all(h.lp)
    h.approve_all(h.lp2)

    h.at(310).deposit("alice", 0, 10)
    h.at(312).deposit("bob", 1, 40)
    h.at(315).deposit("carol", 0, 30)
    h.at(320).withdraw("carol", 0, 15)
    h.at(330).deposit("alice", 0, 25)
    h.at(331).emergency_withdraw("bob", 1)
    assert collect_violations(farm) == []
    check_farm_invariants(farm)


def test_invariant_checker_reports_corruption(make_farm):
    h = make_farm(50, 300, 10_000, 10_000)
    farm = h.farm
    farm.add_pool("alice", 100, h.lp)
    h.approve_all(h.lp, ["bob"])
    h.at(310).deposit("bob", 0, 10)

    farm.pool(0).total_score += 1
    h.lp.transfer(farm.account_id, "mallory", 5)
    problems = collect_violations(farm)
    assert any(p.startswith("total_score_mismatch:0") for p in problems)
    assert any(p.startswith("custody_shortfall:0") for p in problems)
    with pytest.raises(InvariantViolation):
        check_farm_invariants(farm)


def test_strict_mode_rolls_back_inconsistent_state(make_farm):
    h = make_farm(50, 300, 10_000, 10_000)
    farm = h.farm
    farm.add_pool("alice", 100, h.lp)
    h.approve_all(h.lp, ["bob"])
    h.at(310).deposit("bob", 0, 10)

    # drain custody behind the farm's back; the next operation must refuse to commit
    h.lp.transfer(farm.account_id, "mallory", 10)
    h.at(320)
    with pytest.raises(InvariantViolation):
        farm.update_pool(0)
    assert farm.pool(0).last_settled_height == 310
    assert h.reward.total_supply == 0


def test_position_journal_restores_only_touched_records():
    ledger = PositionLedger()
    kept = ledger.touch(0, "alice")
    kept.amount = 5

    ledger.begin()
    changed = ledger.touch(0, "alice")
    changed.amount = 50
    ledger.touch(0, "bob").amount = 7
    ledger.rollback()

    assert ledger.peek(0, "alice").amount == 5
    assert len(ledger) == 1

    ledger.begin()
    ledger.touch(0, "bob").amount = 7
    ledger.commit()
    ledger.rollback()
    assert ledger.peek(0, "bob").amount == 7
