# src/yieldfarm/api/routes_public_parts/common.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import Request

from yieldfarm.api.errors import ApiError
from yieldfarm.runtime.service import FarmService

Json = Dict[str, Any]


def _service(request: Request) -> FarmService:
    svc = getattr(request.app.state, "service", None)
    if svc is None:
        raise ApiError.internal("not_ready", "farm service not attached to app.state", {})
    return svc


def _mode(svc: FarmService) -> str:
    return str(svc.cfg.mode or "prod").strip().lower()


def _require_non_prod(svc: FarmService, what: str) -> None:
    if _mode(svc) == "prod":
        raise ApiError.forbidden("prod_disabled", f"{what} is disabled in prod mode", {"mode": _mode(svc)})


def _pool_view(svc: FarmService, pool_id: int) -> Json:
    farm = svc.farm
    pool = farm.pool(pool_id)
    out = pool.to_json()
    out["current_multiplier"] = farm.early_bird_multiplier(farm.height, pool.pool_id)
    out["staked_balance"] = farm.staked_token(pool.pool_id).balance_of(farm.account_id)
    return out


def _position_view(svc: FarmService, pool_id: int, holder: str) -> Json:
    farm = svc.farm
    out = farm.position(pool_id, holder).to_json()
    out["pending_reward"] = farm.pending_reward(pool_id, holder)
    return out
