# src/yieldfarm/ledger/tokens.py
from __future__ import annotations

"""Fungible token ledgers consumed by the farm.

The farm only depends on the `TokenLedger` / `RewardLedger` protocols. The
in-memory implementations here back the tests and the simulator service; they
support snapshot/restore so a failed farm operation can be rolled back across
every ledger it touched.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Protocol, Tuple

from yieldfarm.ledger.constants import REWARD_CAP

Json = Dict[str, Any]


@dataclass
class TokenError(RuntimeError):
    code: str
    reason: str
    details: Json = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.code}:{self.reason}:{self.details}"


class TokenLedger(Protocol):
    asset_id: str

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, owner: str, spender: str, amount: int) -> None: ...

    def transfer(self, sender: str, to: str, amount: int) -> None: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None: ...

    def snapshot(self) -> Any: ...

    def restore(self, snap: Any) -> None: ...


class RewardLedger(TokenLedger, Protocol):
    @property
    def cap(self) -> int: ...

    @property
    def total_supply(self) -> int: ...

    def mintable(self, amount: int) -> int: ...

    def mint_up_to(self, to: str, amount: int, *, minter: str) -> int: ...


def _as_amount(amount: Any) -> int:
    if isinstance(amount, bool):
        raise TokenError("invalid_amount", "amount_must_be_int", {"amount": amount})
    try:
        a = int(amount)
    except (TypeError, ValueError):
        raise TokenError("invalid_amount", "amount_must_be_int", {"amount": amount}) from None
    if a < 0:
        raise TokenError("invalid_amount", "amount_must_be_non_negative", {"amount": a})
    return a


class InMemoryToken:
    """Balances + allowances for a single asset."""

    def __init__(self, asset_id: str, *, balances: Optional[Dict[str, int]] = None) -> None:
        self.asset_id = str(asset_id)
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0
        for acct, amt in (balances or {}).items():
            a = _as_amount(amt)
            self._balances[str(acct)] = a
            self._total_supply += a

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return int(self._balances.get(str(account), 0))

    def holders(self) -> Iterable[str]:
        return sorted(a for a, b in self._balances.items() if b > 0)

    def allowance(self, owner: str, spender: str) -> int:
        return int(self._allowances.get((str(owner), str(spender)), 0))

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self._allowances[(str(owner), str(spender))] = _as_amount(amount)

    def _move(self, sender: str, to: str, amount: int) -> None:
        bal = self.balance_of(sender)
        if amount > bal:
            raise TokenError(
                "insufficient_balance",
                "transfer_amount_exceeds_balance",
                {"asset": self.asset_id, "account": sender, "balance": bal, "amount": amount},
            )
        self._balances[sender] = bal - amount
        self._balances[to] = self.balance_of(to) + amount

    def transfer(self, sender: str, to: str, amount: int) -> None:
        a = _as_amount(amount)
        self._move(str(sender), str(to), a)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        a = _as_amount(amount)
        allowed = self.allowance(owner, spender)
        if a > allowed:
            raise TokenError(
                "insufficient_allowance",
                "transfer_amount_exceeds_allowance",
                {"asset": self.asset_id, "owner": owner, "spender": spender, "allowance": allowed, "amount": a},
            )
        self._move(str(owner), str(to), a)
        self._allowances[(str(owner), str(spender))] = allowed - a

    def issue(self, to: str, amount: int) -> None:
        """Uncapped issuance; simulator faucet and test setup only."""
        self._credit(str(to), _as_amount(amount))

    def _credit(self, to: str, amount: int) -> None:
        self._balances[str(to)] = self.balance_of(to) + amount
        self._total_supply += amount

    def snapshot(self) -> Any:
        # keys are str or (str, str), values int: flat copies are independent
        return dict(self._balances), dict(self._allowances), self._total_supply

    def restore(self, snap: Any) -> None:
        balances, allowances, total = snap
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        self._total_supply = int(total)


class CappedRewardToken(InMemoryToken):
    """Reward asset with a hard supply cap and a minter allowlist."""

    def __init__(
        self,
        asset_id: str,
        *,
        cap: int = REWARD_CAP,
        owner: str = "",
        balances: Optional[Dict[str, int]] = None,
    ) -> None:
        super().__init__(asset_id, balances=balances)
        self._cap = _as_amount(cap)
        if self._total_supply > self._cap:
            raise TokenError("cap_exceeded", "initial_balances_exceed_cap", {"cap": self._cap})
        self.owner = str(owner)
        self._minters: set[str] = {self.owner} if self.owner else set()

    @property
    def cap(self) -> int:
        return self._cap

    def is_minter(self, account: str) -> bool:
        return str(account) in self._minters

    def grant_minter(self, caller: str, account: str) -> None:
        if str(caller) != self.owner:
            raise TokenError("not_owner", "grant_minter_not_authorized", {"caller": caller})
        self._minters.add(str(account))

    def revoke_minter(self, caller: str, account: str) -> None:
        if str(caller) != self.owner:
            raise TokenError("not_owner", "revoke_minter_not_authorized", {"caller": caller})
        self._minters.discard(str(account))

    def _require_minter(self, minter: str) -> None:
        if not self.is_minter(minter):
            raise TokenError("not_minter", "mint_not_authorized", {"asset": self.asset_id, "minter": minter})

    def mintable(self, amount: int) -> int:
        a = _as_amount(amount)
        return min(a, max(self._cap - self._total_supply, 0))

    def mint(self, to: str, amount: int, *, minter: str) -> None:
        """Strict mint: refuses anything beyond the cap."""
        self._require_minter(minter)
        a = _as_amount(amount)
        if self._total_supply + a > self._cap:
            raise TokenError(
                "cap_exceeded",
                "mint_exceeds_cap",
                {"cap": self._cap, "total_supply": self._total_supply, "amount": a},
            )
        self._credit(to, a)

    def mint_up_to(self, to: str, amount: int, *, minter: str) -> int:
        """Mint min(amount, remaining cap); returns what was actually minted."""
        self._require_minter(minter)
        a = self.mintable(amount)
        if a > 0:
            self._credit(to, a)
        return a

    def snapshot(self) -> Any:
        return (super().snapshot(), set(self._minters))

    def restore(self, snap: Any) -> None:
        base, minters = snap
        super().restore(base)
        self._minters = set(minters)
