# src/yieldfarm/api/routes_public_parts/farm.py
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Request

from yieldfarm.api.routes_public_parts.common import _service
from yieldfarm.api.schemas import DevAddressRequest, MigratorRequest

router = APIRouter()


@router.get("/v1/farm")
def v1_farm_info(request: Request):
    svc = _service(request)
    with svc.lock:
        return {"ok": True, "farm_id": svc.cfg.farm_id, "farm": svc.farm.to_json()}


@router.get("/v1/farm/stages")
def v1_farm_stages(request: Request):
    svc = _service(request)
    sched = svc.farm.schedule
    with svc.lock:
        h = svc.farm.height
        return {
            "ok": True,
            "height": h,
            "bonus_stage_heights": list(sched.bonus_stage_heights()),
            "dev_bonus_stage_heights": list(sched.dev_bonus_stage_heights()),
            "emission_multiplier": sched.emission_multiplier(h),
            "dev_fee_divisor": sched.dev_fee_divisor(h),
        }


@router.post("/v1/farm/dev-address")
def v1_farm_set_dev_address(body: DevAddressRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        svc.farm.set_dev_address(body.caller, body.dev_address)
        return {"ok": True, "dev_address": svc.farm.dev_address}


@router.post("/v1/farm/migrator")
def v1_farm_set_migrator(body: MigratorRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        svc.farm.set_migrator(body.caller, body.migrator)
        return {"ok": True, "migrator": svc.farm.migrator}


@router.post("/v1/farm/mass-update")
def v1_farm_mass_update(request: Request):
    svc = _service(request)
    with svc.lock:
        settlements = svc.farm.mass_update_pools()
        return {"ok": True, "height": svc.farm.height, "settlements": [asdict(s) for s in settlements]}
