# src/yieldfarm/ledger/__init__.py
"""Token ledgers: plain transferable assets and the capped reward asset."""

from __future__ import annotations

from yieldfarm.ledger.tokens import CappedRewardToken, InMemoryToken, RewardLedger, TokenError, TokenLedger

__all__ = ["CappedRewardToken", "InMemoryToken", "RewardLedger", "TokenError", "TokenLedger"]
