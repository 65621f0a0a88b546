# src/yieldfarm/api/schemas.py
from __future__ import annotations

"""Pydantic request schemas for the simulator API.

These exist only for HTTP input validation. Farm semantics (permissions,
amount checks, early-bird config validation) stay in the farm core.
"""

from typing import Optional

from pydantic import BaseModel, Field


class AddPoolRequest(BaseModel):
    caller: str = Field(..., description="Account adding the pool (pool_creator role)")
    weight: int = Field(..., ge=0, description="Allocation weight")
    staked_asset_id: str = Field(..., min_length=1, description="Asset staked in this pool")

    min_qualifying_amount: int = Field(default=0, ge=0)
    max_multiplier: int = Field(default=1, ge=1, description="Whole-number early-bird ceiling")
    grace_height: int = Field(default=0, ge=0)
    halving_period: int = Field(default=1, ge=1)

    settle_all: bool = Field(default=True, description="Settle every pool before the weight change")


class SetPoolWeightRequest(BaseModel):
    caller: str
    weight: int = Field(..., ge=0)
    settle_all: bool = True


class StakeRequest(BaseModel):
    caller: str
    amount: int = Field(..., ge=0)


class CustodialStakeRequest(BaseModel):
    caller: str = Field(..., description="Custodian moving the staked tokens")
    amount: int = Field(..., ge=0)
    beneficiary: str = Field(..., min_length=1, description="Holder the position and rewards belong to")


class CallerRequest(BaseModel):
    caller: str


class MigrateDepositRequest(BaseModel):
    caller: str
    amount: int = Field(..., ge=0)
    early_bird: bool = False
    multiplier: int = Field(default=10**12, ge=0, description="Score multiplier scaled by 1e12")
    beneficiary: str = Field(..., min_length=1)


class RoleRequest(BaseModel):
    caller: str
    role: str
    account: str


class DevAddressRequest(BaseModel):
    caller: str
    dev_address: str = Field(..., min_length=1)


class MigratorRequest(BaseModel):
    caller: str
    migrator: str = ""


class ApproveRequest(BaseModel):
    owner: str
    spender: str
    amount: int = Field(..., ge=0)


class FaucetRequest(BaseModel):
    account: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0)


class ClockAdvanceRequest(BaseModel):
    blocks: Optional[int] = Field(default=None, ge=0, description="Advance by this many heights")
    height: Optional[int] = Field(default=None, ge=0, description="Advance to this absolute height")
