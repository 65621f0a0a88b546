# src/yieldfarm/runtime/service.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Optional

from yieldfarm.farm.clock import ManualClock
from yieldfarm.farm.engine import Farm
from yieldfarm.farm.errors import FarmError
from yieldfarm.ledger.tokens import CappedRewardToken, InMemoryToken, TokenLedger
from yieldfarm.runtime.config import FarmConfig, load_farm_config
from yieldfarm.runtime.event_log import log_event

log = logging.getLogger("yieldfarm.service")


@dataclass
class FarmService:
    """In-memory farm plus the token ledgers and clock it runs against.

    The farm itself is single-threaded; `lock` serializes callers (API worker
    threads) around every farm or ledger access.
    """

    cfg: FarmConfig
    clock: ManualClock
    reward_token: CappedRewardToken
    farm: Farm
    tokens: Dict[str, InMemoryToken] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)

    def token(self, asset_id: str) -> TokenLedger:
        a = str(asset_id)
        if a == self.reward_token.asset_id:
            return self.reward_token
        t = self.tokens.get(a)
        if t is None:
            raise FarmError("unknown_asset", "asset_not_found", {"asset_id": a})
        return t

    def staked_token(self, asset_id: str) -> InMemoryToken:
        """Existing staked ledger for `asset_id`, created empty on first use."""
        a = str(asset_id).strip()
        if not a:
            raise FarmError("invalid_asset", "asset_id_empty", {})
        if a == self.reward_token.asset_id:
            raise FarmError("invalid_asset", "reward_asset_not_stakeable", {"asset_id": a})
        t = self.tokens.get(a)
        if t is None:
            t = InMemoryToken(a)
            self.tokens[a] = t
            log_event(log, "staked_asset_created", asset_id=a)
        return t


def build_service(cfg: Optional[FarmConfig] = None, *, clock: Optional[ManualClock] = None) -> FarmService:
    """Build a FarmService from an explicit config or, if omitted, from YIELDFARM_CONFIG_PATH."""
    c = cfg or load_farm_config()
    clk = clock or ManualClock(0)

    reward = CappedRewardToken(c.reward_asset_id, cap=c.reward_cap, owner=c.owner)
    farm = Farm(
        reward_token=reward,
        dev_address=c.dev_address,
        base_rate_per_height=c.base_rate_per_height,
        start_height=c.start_height,
        bonus_end_height=c.bonus_end_height,
        dev_bonus_end_height=c.dev_bonus_end_height,
        owner=c.owner,
        clock=clk,
    )
    reward.grant_minter(c.owner, farm.account_id)

    tokens = {
        asset_id: InMemoryToken(asset_id, balances=balances) for asset_id, balances in sorted(c.staked_assets.items())
    }

    log_event(
        log,
        "service_built",
        farm_id=c.farm_id,
        mode=c.mode,
        staked_assets=sorted(tokens.keys()),
        height=clk.height,
    )
    return FarmService(cfg=c, clock=clk, reward_token=reward, farm=farm, tokens=tokens)
