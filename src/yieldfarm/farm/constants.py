# src/yieldfarm/farm/constants.py
from __future__ import annotations

"""Farm emission and bonus constants.

Schedule anchors:
- Four equal bonus stages between start and bonus end, then 1x forever
- Dev fee declines over its own four stages, then 2% forever
- Early-bird multipliers and reward-per-score accumulators are fixed point at 1e12
"""

# Fixed-point scale shared by the reward accumulator and early-bird multipliers.
PRECISION: int = 10**12

# Emission multipliers per bonus stage, then after bonus end.
BONUS_STAGE_MULTIPLIERS = (20, 15, 10, 5)
POST_BONUS_MULTIPLIER: int = 1

# Dev fee as 1/divisor of each settlement's pool reward: 10%, 8.33%, 6.25%, 4%, then 2%.
DEV_FEE_STAGE_DIVISORS = (10, 12, 16, 25)
POST_DEV_BONUS_DIVISOR: int = 50

BONUS_STAGES: int = 4

# Account id under which the farm holds staked tokens and undistributed rewards.
FARM_ACCOUNT_ID: str = "FARM"

# Roles
ROLE_EXECUTIVE: str = "executive"
ROLE_POOL_CREATOR: str = "pool_creator"
ROLE_POOL_WEIGHT: str = "pool_weight"
ROLE_CUSTODIAN: str = "custodian"

ALL_ROLES = (ROLE_EXECUTIVE, ROLE_POOL_CREATOR, ROLE_POOL_WEIGHT, ROLE_CUSTODIAN)
