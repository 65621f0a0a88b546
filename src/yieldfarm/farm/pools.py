from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List

from yieldfarm.farm.early_bird import EarlyBirdConfig
from yieldfarm.farm.errors import DuplicateStakedAsset, unknown_pool

Json = Dict[str, Any]


@dataclass
class Pool:
    pool_id: int
    staked_asset_id: str
    weight: int
    last_settled_height: int
    early_bird: EarlyBirdConfig = field(default_factory=EarlyBirdConfig)
    acc_reward_per_score: int = 0
    total_score: int = 0

    def to_json(self) -> Json:
        out = asdict(self)
        out["early_bird"] = asdict(self.early_bird)
        return out


class PoolRegistry:
    """Append-only, index-ordered pool list with a staked-asset uniqueness index."""

    def __init__(self) -> None:
        self._pools: List[Pool] = []
        self._by_asset: Dict[str, int] = {}
        self._total_weight = 0

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[Pool]:
        return iter(self._pools)

    @property
    def total_weight(self) -> int:
        return self._total_weight

    def get(self, pool_id: int) -> Pool:
        try:
            pid = int(pool_id)
        except (TypeError, ValueError):
            raise unknown_pool(pool_id) from None
        if pid < 0 or pid >= len(self._pools):
            raise unknown_pool(pool_id)
        return self._pools[pid]

    def has_asset(self, staked_asset_id: str) -> bool:
        return str(staked_asset_id) in self._by_asset

    def append(
        self,
        *,
        staked_asset_id: str,
        weight: int,
        last_settled_height: int,
        early_bird: EarlyBirdConfig,
    ) -> Pool:
        asset = str(staked_asset_id)
        if asset in self._by_asset:
            raise DuplicateStakedAsset(
                "duplicate_staked_asset",
                "staked_asset_already_added",
                {"staked_asset_id": asset, "pool_id": self._by_asset[asset]},
            )
        pool = Pool(
            pool_id=len(self._pools),
            staked_asset_id=asset,
            weight=int(weight),
            last_settled_height=int(last_settled_height),
            early_bird=early_bird,
        )
        self._pools.append(pool)
        self._by_asset[asset] = pool.pool_id
        self._total_weight += pool.weight
        return pool

    def set_weight(self, pool_id: int, weight: int) -> Pool:
        pool = self.get(pool_id)
        self._total_weight = self._total_weight - pool.weight + int(weight)
        pool.weight = int(weight)
        return pool
