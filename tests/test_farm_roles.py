from __future__ import annotations

import pytest

from yieldfarm.farm.constants import ALL_ROLES
from yieldfarm.farm.errors import DuplicateStakedAsset, FarmError, InvalidPoolConfig, Unauthorized

ROLE_HOLDERS = {
    "executive": "exec",
    "pool_creator": "head",
    "pool_weight": "sous",
    "custodian": "waiter",
}


@pytest.fixture
def staffed(make_farm):
    """Every role assigned to its own account; the creator gave up its roles."""
    h = make_farm(50, 300, 100_000, 100_000)
    farm = h.farm
    for role, acct in ROLE_HOLDERS.items():
        assert farm.grant_role("alice", role, acct)
    farm.renounce_role("alice", "executive", "alice")
    farm.renounce_role("alice", "pool_creator", "alice")
    return h


def test_creator_grants_and_renounces(make_farm):
    farm = make_farm(50, 300, 100_000, 100_000).farm
    for role, acct in ROLE_HOLDERS.items():
        farm.grant_role("alice", role, acct)

    for role in ALL_ROLES:
        for acct in ROLE_HOLDERS.values():
            assert farm.has_role(role, acct) == (ROLE_HOLDERS[role] == acct)

    assert farm.renounce_role("alice", "executive", "alice")
    assert farm.renounce_role("alice", "pool_creator", "alice")
    assert not farm.has_role("executive", "alice")
    assert not farm.has_role("pool_creator", "alice")


def test_grant_is_idempotent(make_farm):
    farm = make_farm(50, 300, 100_000, 100_000).farm
    assert farm.grant_role("alice", "custodian", "bob") is True
    assert farm.grant_role("alice", "custodian", "bob") is False
    assert farm.revoke_role("alice", "custodian", "bob") is True
    assert farm.revoke_role("alice", "custodian", "bob") is False


def test_only_executive_grants(staffed):
    farm = staffed.farm
    for role in ALL_ROLES:
        for caller in ("alice", "head", "sous", "waiter"):
            with pytest.raises(Unauthorized):
                farm.grant_role(caller, role, "bob")

    for role in ALL_ROLES:
        farm.grant_role("exec", role, "bob")
        assert farm.has_role(role, "bob")


def test_renounce_only_for_self(staffed):
    with pytest.raises(Unauthorized):
        staffed.farm.renounce_role("exec", "custodian", "waiter")
    assert staffed.farm.has_role("custodian", "waiter")


def test_unknown_role_rejected(staffed):
    with pytest.raises(FarmError) as ei:
        staffed.farm.grant_role("exec", "chef", "bob")
    assert ei.value.code == "unknown_role"


def test_only_pool_creator_adds_pools(staffed):
    farm = staffed.farm
    for caller in ("alice", "exec", "sous", "waiter"):
        with pytest.raises(Unauthorized) as ei:
            farm.add_pool(caller, 1, staffed.lp, 0, 1, 100_000, 1)
        assert ei.value.details["operation"] == "add_pool"

    farm.add_pool("head", 1, staffed.lp, 0, 1, 100_000, 1)
    assert farm.pool_length() == 1


def test_pool_creator_or_weight_role_sets_weight(staffed):
    farm = staffed.farm
    farm.add_pool("head", 1, staffed.lp, 0, 1, 100_000, 1)
    farm.add_pool("head", 1, staffed.lp2, 0, 1, 100_000, 1)

    for caller in ("alice", "exec", "waiter"):
        with pytest.raises(Unauthorized):
            farm.set_pool_weight(caller, 0, 2)

    farm.set_pool_weight("head", 0, 2)
    farm.set_pool_weight("sous", 1, 5)
    assert farm.pool(0).weight == 2
    assert farm.pool(1).weight == 5
    assert farm.total_weight == 7


def test_only_executive_sets_migrator(staffed):
    farm = staffed.farm
    for caller in ("alice", "head", "sous", "waiter"):
        with pytest.raises(Unauthorized):
            farm.set_migrator(caller, "bob")

    farm.set_migrator("exec", "bob")
    assert farm.migrator == "bob"


def test_duplicate_staked_asset_rejected(make_farm):
    h = make_farm(100, 100, 1000, 1000)
    farm = h.farm
    farm.add_pool("alice", 100, h.lp, 0, 1, 100_000, 1)
    with pytest.raises(DuplicateStakedAsset):
        farm.add_pool("alice", 100, h.lp, 0, 1, 100_000, 1)
    farm.add_pool("alice", 100, h.lp2, 0, 1, 100_000, 1)
    with pytest.raises(DuplicateStakedAsset):
        farm.add_pool("alice", 100, h.lp2, 100, 10, 1000, 4, settle_all=False)
    assert farm.pool_length() == 2
    assert farm.total_weight == 200


def test_invalid_early_bird_config_rejected(make_farm):
    h = make_farm(100, 100, 1000, 1000)
    with pytest.raises(InvalidPoolConfig):
        h.farm.add_pool("alice", 1, h.lp, 0, 1, 100, 0)
    with pytest.raises(InvalidPoolConfig):
        h.farm.add_pool("alice", 1, h.lp, 0, 0, 100, 1)
    assert h.farm.pool_length() == 0
