# src/yieldfarm/api/routes_public_parts/positions.py
from __future__ import annotations

from fastapi import APIRouter, Request

from yieldfarm.api.routes_public_parts.common import _position_view, _service
from yieldfarm.api.schemas import CallerRequest, CustodialStakeRequest, MigrateDepositRequest, StakeRequest

router = APIRouter()


@router.get("/v1/pools/{pool_id}/positions/{holder}")
def v1_position_get(pool_id: int, holder: str, request: Request):
    svc = _service(request)
    with svc.lock:
        return {"ok": True, "position": _position_view(svc, pool_id, holder)}


@router.get("/v1/pools/{pool_id}/positions/{holder}/pending")
def v1_position_pending(pool_id: int, holder: str, request: Request):
    svc = _service(request)
    with svc.lock:
        return {
            "ok": True,
            "pool_id": pool_id,
            "holder": holder,
            "height": svc.farm.height,
            "pending_reward": svc.farm.pending_reward(pool_id, holder),
        }


@router.post("/v1/pools/{pool_id}/deposit")
def v1_deposit(pool_id: int, body: StakeRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        svc.farm.deposit(body.caller, pool_id, body.amount)
        return {"ok": True, "position": _position_view(svc, pool_id, body.caller)}


@router.post("/v1/pools/{pool_id}/withdraw")
def v1_withdraw(pool_id: int, body: StakeRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        svc.farm.withdraw(body.caller, pool_id, body.amount)
        return {"ok": True, "position": _position_view(svc, pool_id, body.caller)}


@router.post("/v1/pools/{pool_id}/emergency-withdraw")
def v1_emergency_withdraw(pool_id: int, body: CallerRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        returned = svc.farm.emergency_withdraw(body.caller, pool_id)
        return {"ok": True, "returned": returned, "position": _position_view(svc, pool_id, body.caller)}


@router.post("/v1/pools/{pool_id}/deposit-to")
def v1_deposit_to(pool_id: int, body: CustodialStakeRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        svc.farm.deposit_to(body.caller, pool_id, body.amount, body.beneficiary)
        return {"ok": True, "position": _position_view(svc, pool_id, body.beneficiary)}


@router.post("/v1/pools/{pool_id}/withdraw-from")
def v1_withdraw_from(pool_id: int, body: CustodialStakeRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        svc.farm.withdraw_from(body.caller, pool_id, body.amount, body.beneficiary)
        return {"ok": True, "position": _position_view(svc, pool_id, body.beneficiary)}


@router.post("/v1/pools/{pool_id}/migrate")
def v1_migrate_deposit(pool_id: int, body: MigrateDepositRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        svc.farm.migrate_deposit(
            body.caller,
            pool_id,
            body.amount,
            body.early_bird,
            body.multiplier,
            body.beneficiary,
        )
        return {"ok": True, "position": _position_view(svc, pool_id, body.beneficiary)}
