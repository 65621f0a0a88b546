# src/yieldfarm/api/routes_public_parts/clock.py
from __future__ import annotations

from fastapi import APIRouter, Request

from yieldfarm.api.errors import ApiError
from yieldfarm.api.routes_public_parts.common import _require_non_prod, _service
from yieldfarm.api.schemas import ClockAdvanceRequest

router = APIRouter()


@router.get("/v1/clock")
def v1_clock(request: Request):
    svc = _service(request)
    return {"ok": True, "height": svc.clock.height}


@router.post("/v1/clock/advance")
def v1_clock_advance(body: ClockAdvanceRequest, request: Request):
    svc = _service(request)
    _require_non_prod(svc, "clock advance")
    if (body.blocks is None) == (body.height is None):
        raise ApiError.bad_request("bad_request", "exactly one of blocks or height is required", {})

    with svc.lock:
        before = svc.clock.height
        if body.height is not None:
            if body.height < before:
                raise ApiError.bad_request(
                    "clock_backwards", "height cannot move backwards", {"height": before, "requested": body.height}
                )
            svc.clock.advance_to(body.height)
        else:
            svc.clock.advance(int(body.blocks or 0))
        return {"ok": True, "previous_height": before, "height": svc.clock.height}
