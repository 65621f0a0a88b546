# src/yieldfarm/api/routes_public_parts/metrics.py
from __future__ import annotations

from fastapi import APIRouter, Request, Response

from yieldfarm.runtime.metrics import format_prometheus, metrics_enabled, set_gauge

router = APIRouter()


def _refresh_farm_gauges(request: Request) -> None:
    # point-in-time values are sampled at scrape time; counters are pushed by the farm
    svc = getattr(request.app.state, "service", None)
    if svc is None:
        return
    with svc.lock:
        farm = svc.farm
        set_gauge("height", farm.height)
        set_gauge("pools", farm.pool_length())
        set_gauge("total_weight", farm.total_weight)
        set_gauge("positions", len(farm.positions))
        set_gauge("reward_total_supply", svc.reward_token.total_supply)
        set_gauge("reward_cap_remaining", svc.reward_token.mintable(svc.reward_token.cap))
        set_gauge("reward_custody", svc.reward_token.balance_of(farm.account_id))


@router.get("/metrics")
def metrics(request: Request) -> Response:
    """Prometheus text; 404 unless YIELDFARM_METRICS_ENABLED=1."""
    if not metrics_enabled():
        return Response(status_code=404, content="not_found\n", media_type="text/plain")
    _refresh_farm_gauges(request)
    return Response(content=format_prometheus(), media_type="text/plain")
