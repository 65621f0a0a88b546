# src/yieldfarm/api/routes_public_parts/health.py
from __future__ import annotations

import time

from fastapi import APIRouter, Request

router = APIRouter()


def _now_ms() -> int:
    return int(time.time() * 1000)


def _health_payload(request: Request) -> dict[str, object]:
    # health must never fail on a missing service; it reports ready=false instead
    svc = getattr(request.app.state, "service", None)
    if svc is None:
        return {"ok": True, "service": "yieldfarm", "version": "v1", "ts_ms": _now_ms(), "ready": False}

    with svc.lock:
        return {
            "ok": True,
            "service": "yieldfarm",
            "version": "v1",
            "ts_ms": _now_ms(),
            "ready": True,
            "farm_id": svc.cfg.farm_id,
            "mode": svc.cfg.mode,
            "height": svc.clock.height,
            "pool_length": svc.farm.pool_length(),
        }


@router.get("/v1/health")
def v1_health(request: Request) -> dict[str, object]:
    return _health_payload(request)


@router.get("/healthz")
def healthz(request: Request) -> dict[str, object]:
    # Kubernetes-style alias
    return _health_payload(request)
