# src/yieldfarm/ledger/constants.py
from __future__ import annotations

"""Reward token monetary constants.

- Fixed supply cap: 580,000,000 tokens, divisible to 1e-18
- Minting beyond the cap is refused by `mint`, clamped by `mint_up_to`
"""

# Monetary precision (1 token = 1e18 units)
TOKEN_DECIMALS: int = 18
TOKEN: int = 10**TOKEN_DECIMALS

# Supply cap: 580,000,000 tokens
REWARD_CAP_TOKENS: int = 580_000_000
REWARD_CAP: int = REWARD_CAP_TOKENS * TOKEN

REWARD_ASSET_ID: str = "REWARD"
