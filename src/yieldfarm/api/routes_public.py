# src/yieldfarm/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from yieldfarm.api.routes_public_parts.clock import router as clock_router
from yieldfarm.api.routes_public_parts.farm import router as farm_router
from yieldfarm.api.routes_public_parts.health import router as health_router
from yieldfarm.api.routes_public_parts.metrics import router as metrics_router
from yieldfarm.api.routes_public_parts.pools import router as pools_router
from yieldfarm.api.routes_public_parts.positions import router as positions_router
from yieldfarm.api.routes_public_parts.roles import router as roles_router
from yieldfarm.api.routes_public_parts.tokens import router as tokens_router

public_router = APIRouter()

# Paths carry their own /v1 prefix; metrics is mounted under /v1 here.
public_router.include_router(health_router, tags=["health"])
public_router.include_router(farm_router, tags=["farm"])
public_router.include_router(pools_router, tags=["pools"])
public_router.include_router(positions_router, tags=["positions"])
public_router.include_router(roles_router, tags=["roles"])
public_router.include_router(tokens_router, tags=["tokens"])
public_router.include_router(clock_router, tags=["clock"])

# Ops
public_router.include_router(metrics_router, prefix="/v1", tags=["metrics"])
