# src/yieldfarm/api/routes_public_parts/pools.py
from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Request

from yieldfarm.api.routes_public_parts.common import _pool_view, _service
from yieldfarm.api.schemas import AddPoolRequest, SetPoolWeightRequest

router = APIRouter()


@router.get("/v1/pools")
def v1_pools_list(request: Request):
    svc = _service(request)
    with svc.lock:
        pools = [_pool_view(svc, p.pool_id) for p in svc.farm.pools]
        return {"ok": True, "total_weight": svc.farm.total_weight, "pools": pools}


@router.get("/v1/pools/{pool_id}")
def v1_pool_get(pool_id: int, request: Request):
    svc = _service(request)
    with svc.lock:
        return {"ok": True, "pool": _pool_view(svc, pool_id)}


@router.post("/v1/pools")
def v1_pool_add(body: AddPoolRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        pool = svc.farm.add_pool(
            body.caller,
            body.weight,
            svc.staked_token(body.staked_asset_id),
            min_qualifying_amount=body.min_qualifying_amount,
            max_multiplier=body.max_multiplier,
            grace_height=body.grace_height,
            halving_period=body.halving_period,
            settle_all=body.settle_all,
        )
        return {"ok": True, "pool": _pool_view(svc, pool.pool_id)}


@router.post("/v1/pools/{pool_id}/weight")
def v1_pool_set_weight(pool_id: int, body: SetPoolWeightRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        pool = svc.farm.set_pool_weight(body.caller, pool_id, body.weight, settle_all=body.settle_all)
        return {"ok": True, "pool": _pool_view(svc, pool.pool_id), "total_weight": svc.farm.total_weight}


@router.post("/v1/pools/{pool_id}/update")
def v1_pool_update(pool_id: int, request: Request):
    svc = _service(request)
    with svc.lock:
        s = svc.farm.update_pool(pool_id)
        return {"ok": True, "settlement": asdict(s)}


@router.get("/v1/pools/{pool_id}/early-bird")
def v1_pool_early_bird(pool_id: int, request: Request, height: Optional[int] = None):
    svc = _service(request)
    with svc.lock:
        h = svc.farm.height if height is None else int(height)
        return {
            "ok": True,
            "pool_id": pool_id,
            "height": h,
            "multiplier": svc.farm.early_bird_multiplier(h, pool_id),
        }
