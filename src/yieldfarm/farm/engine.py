# src/yieldfarm/farm/engine.py
from __future__ import annotations

"""Farm: staking pools, positions and reward payout on top of lazy accrual.

Every mutating operation follows the same shape:

  1. permission check
  2. settle the affected pool(s) against the clock height
  3. update positions / pool totals
  4. external effects: reward payout, staked-token transfers

Operations are fail-atomic. Farm state and every token ledger the farm talks
to are snapshotted on entry and restored if anything raises, so a rejected
operation leaves no partial settlement behind.
"""

import copy
import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from yieldfarm.farm.access import AccessControl
from yieldfarm.farm.accrual import AccrualEngine, Settlement
from yieldfarm.farm.clock import Clock
from yieldfarm.farm.constants import (
    FARM_ACCOUNT_ID,
    PRECISION,
    ROLE_EXECUTIVE,
    ROLE_POOL_CREATOR,
)
from yieldfarm.farm.early_bird import EarlyBirdConfig, apply_multiplier, early_bird_multiplier
from yieldfarm.farm.errors import (
    DuplicateStakedAsset,
    FarmError,
    InsufficientStake,
    InvalidPoolConfig,
    NotDevAddress,
    ReentrantCall,
    unauthorized,
)
from yieldfarm.farm.invariants import check_farm_invariants
from yieldfarm.farm.pools import Pool, PoolRegistry
from yieldfarm.farm.positions import Position, PositionLedger
from yieldfarm.farm.schedule import RewardSchedule
from yieldfarm.ledger.tokens import RewardLedger, TokenLedger
from yieldfarm.runtime.event_log import log_event
from yieldfarm.runtime.metrics import inc_counter, set_gauge

Json = Dict[str, Any]

log = logging.getLogger("yieldfarm.farm")


def _as_amount(v: Any, *, field: str = "amount") -> int:
    if isinstance(v, bool):
        raise FarmError("invalid_amount", f"{field}_must_be_int", {field: v})
    try:
        a = int(v)
    except (TypeError, ValueError):
        raise FarmError("invalid_amount", f"{field}_must_be_int", {field: v}) from None
    if a < 0:
        raise FarmError("invalid_amount", f"{field}_must_be_non_negative", {field: a})
    return a


def _strict_from_env() -> bool:
    v = (os.environ.get("YIELDFARM_STRICT_INVARIANTS") or "").strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


class Farm:
    def __init__(
        self,
        *,
        reward_token: RewardLedger,
        dev_address: str,
        base_rate_per_height: int,
        start_height: int,
        bonus_end_height: int,
        dev_bonus_end_height: int,
        owner: str,
        clock: Clock,
        account_id: str = FARM_ACCOUNT_ID,
        strict_invariants: Optional[bool] = None,
    ) -> None:
        if not str(dev_address or "").strip():
            raise ValueError("dev_address must be a non-empty string")
        if not str(owner or "").strip():
            raise ValueError("owner must be a non-empty string")
        if str(dev_address) == str(account_id):
            raise ValueError("dev_address must not be the farm account")

        self.account_id = str(account_id)
        self.clock = clock
        self.reward_token = reward_token
        self.schedule = RewardSchedule(
            start_height=int(start_height),
            bonus_end_height=int(bonus_end_height),
            dev_bonus_end_height=int(dev_bonus_end_height),
        )
        self.base_rate_per_height = _as_amount(base_rate_per_height, field="base_rate_per_height")
        self.strict_invariants = _strict_from_env() if strict_invariants is None else bool(strict_invariants)

        self._dev_address = str(dev_address)
        self._migrator = ""
        self._registry = PoolRegistry()
        self._positions = PositionLedger()
        self._staked: Dict[str, TokenLedger] = {}
        self._access = AccessControl(initial={ROLE_EXECUTIVE: [owner], ROLE_POOL_CREATOR: [owner]})
        self._engine = self._build_engine()
        self._busy = False

    def _build_engine(self) -> AccrualEngine:
        return AccrualEngine(
            schedule=self.schedule,
            base_rate_per_height=self.base_rate_per_height,
            pools=self._registry,
            reward_token=self.reward_token,
            farm_account=self.account_id,
            dev_address=lambda: self._dev_address,
        )

    # ---- views ----

    @property
    def height(self) -> int:
        return int(self.clock.height)

    @property
    def dev_address(self) -> str:
        return self._dev_address

    @property
    def migrator(self) -> str:
        return self._migrator

    @property
    def pools(self) -> PoolRegistry:
        return self._registry

    @property
    def positions(self) -> PositionLedger:
        return self._positions

    @property
    def access(self) -> AccessControl:
        return self._access

    @property
    def total_weight(self) -> int:
        return self._registry.total_weight

    def pool_length(self) -> int:
        return len(self._registry)

    def pool(self, pool_id: int) -> Pool:
        return self._registry.get(pool_id)

    def position(self, pool_id: int, holder: str) -> Position:
        self._registry.get(pool_id)
        return self._positions.peek(pool_id, holder)

    def staked_token(self, pool_id: int) -> TokenLedger:
        return self._staked[self._registry.get(pool_id).staked_asset_id]

    def has_role(self, role: str, account: str) -> bool:
        return self._access.has_role(role, account)

    def early_bird_multiplier(self, height: int, pool_id: int) -> int:
        return early_bird_multiplier(self._registry.get(pool_id).early_bird, height)

    def pending_reward(self, pool_id: int, holder: str) -> int:
        pool = self._registry.get(pool_id)
        return self._engine.pending_reward(pool, self._positions.peek(pool_id, holder), self.height)

    # ---- atomicity ----

    def _snapshot(self) -> Any:
        # pools and roles are few and copied whole; positions are journaled per touch
        self._positions.begin()
        state = copy.deepcopy((self._registry, self._access, self._dev_address, self._migrator))
        ledgers = {id(t): (t, t.snapshot()) for t in [self.reward_token, *self._staked.values()]}
        return state, dict(self._staked), ledgers

    def _restore(self, snap: Any) -> None:
        state, staked, ledgers = snap
        self._registry, self._access, self._dev_address, self._migrator = state
        self._positions.rollback()
        self._staked = staked
        for token, token_snap in ledgers.values():
            token.restore(token_snap)
        self._engine = self._build_engine()

    @contextmanager
    def _operation(self, name: str, **fields: Any) -> Iterator[int]:
        if self._busy:
            raise ReentrantCall("reentrant_call", f"{name}:operation_in_progress", {"operation": name})
        self._busy = True
        snap = self._snapshot()
        try:
            yield self.height
            if self.strict_invariants:
                check_farm_invariants(self)
            self._positions.commit()
        except Exception as e:
            self._restore(snap)
            inc_counter("operations_rolled_back_total")
            log_event(log, "operation_rolled_back", operation=name, error=str(e), **fields)
            raise
        finally:
            self._busy = False
        inc_counter(f"op_{name}_total")

    # ---- internal effects ----

    def _pay_reward(self, to: str, amount: int) -> int:
        """Pay from farm custody, never more than the farm holds."""
        bal = self.reward_token.balance_of(self.account_id)
        paid = min(int(amount), bal)
        if paid > 0:
            self.reward_token.transfer(self.account_id, to, paid)
        return paid

    def _credit_stake(self, pool: Pool, pos: Position, amount: int, height: int) -> None:
        eb = pool.early_bird
        new_amount = pos.amount + amount
        if pos.qualified_early:
            mult = early_bird_multiplier(eb, height)
            new_score = pos.score + apply_multiplier(amount, mult)
            pos.recorded_multiplier = mult
        elif new_amount >= eb.min_qualifying_amount:
            # first qualification rescoring covers the whole position
            mult = early_bird_multiplier(eb, height)
            new_score = apply_multiplier(new_amount, mult)
            pos.qualified_early = True
            pos.recorded_multiplier = mult
        else:
            new_score = pos.score + amount

        pool.total_score += new_score - pos.score
        pos.amount = new_amount
        pos.score = new_score

    def _debit_stake(self, pool: Pool, pos: Position, amount: int) -> None:
        prev = pos.amount
        new_amount = prev - amount
        if pos.qualified_early and new_amount < pool.early_bird.min_qualifying_amount:
            pos.qualified_early = False
            pos.recorded_multiplier = PRECISION
            new_score = new_amount
        else:
            new_score = pos.score - pos.score * amount // prev

        pool.total_score += new_score - pos.score
        pos.amount = new_amount
        pos.score = new_score

    def _require_holder(self, account: str, field: str) -> str:
        """Stake owners and payers are outside accounts; never the farm custody account."""
        a = str(account or "").strip()
        if not a:
            raise FarmError("invalid_holder", f"{field}_empty", {field: account})
        if a == self.account_id:
            raise FarmError("invalid_holder", f"{field}_is_farm_account", {field: a})
        return a

    def _unclaimed(self, pool: Pool, pos: Position) -> int:
        if pos.score <= 0:
            return 0
        return max(pos.accrued(pool.acc_reward_per_score) - pos.reward_debt, 0)

    # ---- pool administration ----

    def add_pool(
        self,
        caller: str,
        weight: int,
        staked_token: TokenLedger,
        min_qualifying_amount: int = 0,
        max_multiplier: int = 1,
        grace_height: int = 0,
        halving_period: int = 1,
        settle_all: bool = True,
    ) -> Pool:
        self._access.require("add_pool", caller)
        if self._registry.has_asset(staked_token.asset_id):
            raise DuplicateStakedAsset(
                "duplicate_staked_asset", "staked_asset_already_added", {"staked_asset_id": staked_token.asset_id}
            )
        w = _as_amount(weight, field="weight")
        try:
            eb = EarlyBirdConfig(
                min_qualifying_amount=int(min_qualifying_amount),
                max_multiplier=int(max_multiplier),
                grace_height=int(grace_height),
                halving_period=int(halving_period),
            )
        except (TypeError, ValueError) as e:
            raise InvalidPoolConfig("invalid_pool_config", str(e), {"staked_asset_id": staked_token.asset_id}) from e

        with self._operation("add_pool", caller=caller, staked_asset_id=staked_token.asset_id) as h:
            if settle_all:
                self._engine.settle_all(h)
            pool = self._registry.append(
                staked_asset_id=staked_token.asset_id,
                weight=w,
                last_settled_height=max(h, self.schedule.start_height),
                early_bird=eb,
            )
            self._staked[pool.staked_asset_id] = staked_token

        set_gauge("pools", len(self._registry))
        set_gauge("total_weight", self._registry.total_weight)
        log_event(log, "pool_added", caller=caller, height=h, **pool.to_json())
        return pool

    def set_pool_weight(self, caller: str, pool_id: int, weight: int, settle_all: bool = True) -> Pool:
        self._access.require("set_pool_weight", caller)
        w = _as_amount(weight, field="weight")
        with self._operation("set_pool_weight", caller=caller, pool_id=pool_id) as h:
            self._registry.get(pool_id)
            if settle_all:
                self._engine.settle_all(h)
            pool = self._registry.set_weight(pool_id, w)

        set_gauge("total_weight", self._registry.total_weight)
        log_event(log, "pool_weight_set", caller=caller, pool_id=pool.pool_id, weight=w, height=h)
        return pool

    def mass_update_pools(self) -> List[Settlement]:
        with self._operation("mass_update_pools") as h:
            return self._engine.settle_all(h)

    def update_pool(self, pool_id: int) -> Settlement:
        with self._operation("update_pool", pool_id=pool_id) as h:
            return self._engine.settle(self._registry.get(pool_id), h)

    # ---- staking ----

    def deposit(self, caller: str, pool_id: int, amount: int) -> Position:
        self._require_holder(caller, "caller")
        return self._deposit("deposit", pool_id, amount, payer=caller, beneficiary=caller)

    def deposit_to(self, caller: str, pool_id: int, amount: int, beneficiary: str) -> Position:
        self._access.require("deposit_to", caller)
        self._require_holder(caller, "caller")
        self._require_holder(beneficiary, "beneficiary")
        return self._deposit("deposit_to", pool_id, amount, payer=caller, beneficiary=beneficiary)

    def _deposit(self, op: str, pool_id: int, amount: int, *, payer: str, beneficiary: str) -> Position:
        a = _as_amount(amount)
        with self._operation(op, pool_id=pool_id, payer=payer, beneficiary=beneficiary, amount=a) as h:
            pool = self._registry.get(pool_id)
            self._engine.settle(pool, h)

            pos = self._positions.touch(pool.pool_id, beneficiary)
            pending = self._unclaimed(pool, pos)
            if a > 0:
                self._credit_stake(pool, pos, a, h)
            pos.reward_debt = pos.accrued(pool.acc_reward_per_score)

            paid = self._pay_reward(beneficiary, pending) if pending > 0 else 0
            if a > 0:
                self._staked[pool.staked_asset_id].transfer_from(self.account_id, payer, self.account_id, a)

        log_event(
            log,
            op,
            pool_id=pool.pool_id,
            payer=payer,
            beneficiary=beneficiary,
            amount=a,
            reward_paid=paid,
            score=pos.score,
            qualified_early=pos.qualified_early,
            height=h,
        )
        return pos

    def withdraw(self, caller: str, pool_id: int, amount: int) -> Position:
        self._require_holder(caller, "caller")
        return self._withdraw("withdraw", pool_id, amount, recipient=caller, beneficiary=caller)

    def withdraw_from(self, caller: str, pool_id: int, amount: int, beneficiary: str) -> Position:
        self._access.require("withdraw_from", caller)
        self._require_holder(caller, "caller")
        self._require_holder(beneficiary, "beneficiary")
        return self._withdraw("withdraw_from", pool_id, amount, recipient=caller, beneficiary=beneficiary)

    def _withdraw(self, op: str, pool_id: int, amount: int, *, recipient: str, beneficiary: str) -> Position:
        a = _as_amount(amount)
        with self._operation(op, pool_id=pool_id, recipient=recipient, beneficiary=beneficiary, amount=a) as h:
            pool = self._registry.get(pool_id)
            staked = self._positions.peek(pool.pool_id, beneficiary).amount
            if a > staked:
                raise InsufficientStake(
                    "insufficient_stake",
                    "withdraw_exceeds_position",
                    {"pool_id": pool.pool_id, "holder": beneficiary, "amount": a, "staked": staked},
                )
            self._engine.settle(pool, h)

            pos = self._positions.touch(pool.pool_id, beneficiary)
            pending = self._unclaimed(pool, pos)
            if a > 0:
                self._debit_stake(pool, pos, a)
            pos.reward_debt = pos.accrued(pool.acc_reward_per_score)

            paid = self._pay_reward(beneficiary, pending) if pending > 0 else 0
            if a > 0:
                self._staked[pool.staked_asset_id].transfer(self.account_id, recipient, a)

        log_event(
            log,
            op,
            pool_id=pool.pool_id,
            recipient=recipient,
            beneficiary=beneficiary,
            amount=a,
            reward_paid=paid,
            score=pos.score,
            qualified_early=pos.qualified_early,
            height=h,
        )
        return pos

    def emergency_withdraw(self, caller: str, pool_id: int) -> int:
        """Return the caller's whole stake, forfeiting unclaimed reward.

        Never settles and never touches the reward ledger.
        """
        self._require_holder(caller, "caller")
        with self._operation("emergency_withdraw", pool_id=pool_id, caller=caller) as h:
            pool = self._registry.get(pool_id)
            pos = self._positions.touch(pool.pool_id, caller)
            amount = pos.amount
            pool.total_score -= pos.score
            pos.amount = 0
            pos.score = 0
            pos.reward_debt = 0
            pos.qualified_early = False
            pos.recorded_multiplier = PRECISION
            if amount > 0:
                self._staked[pool.staked_asset_id].transfer(self.account_id, caller, amount)

        log_event(log, "emergency_withdraw", pool_id=pool.pool_id, holder=caller, amount=amount, height=h)
        return amount

    def migrate_deposit(
        self,
        caller: str,
        pool_id: int,
        amount: int,
        early_bird: bool,
        multiplier: int,
        beneficiary: str,
    ) -> Position:
        """Credit a ported position to `beneficiary` with an explicit multiplier.

        Staked tokens come from the caller (the migration operator), not the
        beneficiary. The multiplier is taken as given instead of being derived
        from the pool's early-bird schedule.
        """
        if not (self._access.allowed("migrate_deposit", caller) or (self._migrator and caller == self._migrator)):
            raise unauthorized("migrate_deposit", str(caller))
        self._require_holder(caller, "caller")
        self._require_holder(beneficiary, "beneficiary")
        a = _as_amount(amount)
        mult = _as_amount(multiplier, field="multiplier") if early_bird else PRECISION
        if mult < PRECISION:
            raise FarmError("invalid_multiplier", "multiplier_below_one", {"multiplier": mult, "precision": PRECISION})

        with self._operation("migrate_deposit", pool_id=pool_id, caller=caller, beneficiary=beneficiary) as h:
            pool = self._registry.get(pool_id)
            self._engine.settle(pool, h)

            pos = self._positions.touch(pool.pool_id, beneficiary)
            pending = self._unclaimed(pool, pos)
            added = apply_multiplier(a, mult)
            pos.amount += a
            pos.score += added
            pool.total_score += added
            pos.qualified_early = bool(early_bird)
            pos.recorded_multiplier = mult
            pos.reward_debt = pos.accrued(pool.acc_reward_per_score)

            paid = self._pay_reward(beneficiary, pending) if pending > 0 else 0
            if a > 0:
                self._staked[pool.staked_asset_id].transfer_from(self.account_id, caller, self.account_id, a)

        log_event(
            log,
            "migrate_deposit",
            pool_id=pool.pool_id,
            caller=caller,
            beneficiary=beneficiary,
            amount=a,
            score=pos.score,
            multiplier=mult,
            reward_paid=paid,
            height=h,
        )
        return pos

    # ---- addresses & roles ----

    def set_dev_address(self, caller: str, new_dev: str) -> None:
        if str(caller) != self._dev_address:
            raise NotDevAddress("not_dev_address", "caller_is_not_dev", {"caller": caller})
        nd = self._require_holder(new_dev, "dev_address")
        old, self._dev_address = self._dev_address, nd
        log_event(log, "dev_address_set", old=old, new=nd)

    def set_migrator(self, caller: str, migrator: str) -> None:
        self._access.require("set_migrator", caller)
        self._migrator = str(migrator or "").strip()
        log_event(log, "migrator_set", caller=caller, migrator=self._migrator)

    def grant_role(self, caller: str, role: str, account: str) -> bool:
        changed = self._access.grant_role(caller, role, account)
        if changed:
            log_event(log, "role_granted", caller=caller, role=role, account=account)
        return changed

    def revoke_role(self, caller: str, role: str, account: str) -> bool:
        changed = self._access.revoke_role(caller, role, account)
        if changed:
            log_event(log, "role_revoked", caller=caller, role=role, account=account)
        return changed

    def renounce_role(self, caller: str, role: str, account: str) -> bool:
        changed = self._access.renounce_role(caller, role, account)
        if changed:
            log_event(log, "role_revoked", caller=caller, role=role, account=account, renounced=True)
        return changed

    # ---- export ----

    def to_json(self) -> Json:
        return {
            "account_id": self.account_id,
            "height": self.height,
            "base_rate_per_height": self.base_rate_per_height,
            "start_height": self.schedule.start_height,
            "bonus_end_height": self.schedule.bonus_end_height,
            "dev_bonus_end_height": self.schedule.dev_bonus_end_height,
            "bonus_stage_heights": list(self.schedule.bonus_stage_heights()),
            "dev_bonus_stage_heights": list(self.schedule.dev_bonus_stage_heights()),
            "dev_address": self._dev_address,
            "migrator": self._migrator,
            "pool_length": len(self._registry),
            "total_weight": self._registry.total_weight,
            "reward_asset_id": self.reward_token.asset_id,
            "reward_total_supply": self.reward_token.total_supply,
            "reward_cap": self.reward_token.cap,
        }
