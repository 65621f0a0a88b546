from __future__ import annotations

"""Role table and permission checks for farm operations.

Permissions are plain data: operation name -> roles allowed to invoke it.
Every role is administered by the executive role (including executive itself).
"""

from typing import Dict, FrozenSet, Iterable, List, Set

from yieldfarm.farm.constants import (
    ALL_ROLES,
    ROLE_CUSTODIAN,
    ROLE_EXECUTIVE,
    ROLE_POOL_CREATOR,
    ROLE_POOL_WEIGHT,
)
from yieldfarm.farm.errors import FarmError, unauthorized

PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "add_pool": frozenset({ROLE_POOL_CREATOR}),
    "set_pool_weight": frozenset({ROLE_POOL_CREATOR, ROLE_POOL_WEIGHT}),
    "deposit_to": frozenset({ROLE_CUSTODIAN}),
    "withdraw_from": frozenset({ROLE_CUSTODIAN}),
    "set_migrator": frozenset({ROLE_EXECUTIVE}),
    "migrate_deposit": frozenset({ROLE_EXECUTIVE}),
}

ROLE_ADMIN: Dict[str, str] = {role: ROLE_EXECUTIVE for role in ALL_ROLES}


def _check_role(role: str) -> str:
    r = str(role or "").strip()
    if r not in ROLE_ADMIN:
        raise FarmError("unknown_role", "role_not_defined", {"role": role})
    return r


class AccessControl:
    def __init__(self, *, initial: Dict[str, Iterable[str]] | None = None) -> None:
        self._members: Dict[str, Set[str]] = {role: set() for role in ALL_ROLES}
        for role, accounts in (initial or {}).items():
            r = _check_role(role)
            for acct in accounts:
                self._members[r].add(str(acct))

    def has_role(self, role: str, account: str) -> bool:
        return str(account) in self._members.get(str(role), set())

    def members(self, role: str) -> List[str]:
        return sorted(self._members.get(_check_role(role), set()))

    def allowed(self, operation: str, caller: str) -> bool:
        roles = PERMISSIONS.get(operation)
        if roles is None:
            return False
        return any(self.has_role(r, caller) for r in roles)

    def require(self, operation: str, caller: str) -> None:
        if not self.allowed(operation, caller):
            raise unauthorized(operation, str(caller))

    # ---- role administration (idempotent) ----

    def grant_role(self, caller: str, role: str, account: str) -> bool:
        """Returns True when membership changed."""
        r = _check_role(role)
        if not self.has_role(ROLE_ADMIN[r], caller):
            raise unauthorized("grant_role", str(caller))
        before = len(self._members[r])
        self._members[r].add(str(account))
        return len(self._members[r]) != before

    def revoke_role(self, caller: str, role: str, account: str) -> bool:
        r = _check_role(role)
        if not self.has_role(ROLE_ADMIN[r], caller):
            raise unauthorized("revoke_role", str(caller))
        if str(account) not in self._members[r]:
            return False
        self._members[r].discard(str(account))
        return True

    def renounce_role(self, caller: str, role: str, account: str) -> bool:
        r = _check_role(role)
        if str(caller) != str(account):
            raise unauthorized("renounce_role", str(caller))
        if str(account) not in self._members[r]:
            return False
        self._members[r].discard(str(account))
        return True

    def to_json(self) -> Dict[str, List[str]]:
        return {role: self.members(role) for role in self._members}
