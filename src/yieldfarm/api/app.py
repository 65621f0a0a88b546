# src/yieldfarm/api/app.py
from __future__ import annotations

import logging
import os
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from yieldfarm.api.errors import ApiError
from yieldfarm.api.routes_public import public_router
from yieldfarm.api.structured_logging import RequestLogMiddleware
from yieldfarm.farm.errors import FarmError
from yieldfarm.ledger.tokens import TokenError
from yieldfarm.runtime.config import load_farm_config
from yieldfarm.runtime.event_log import log_event
from yieldfarm.runtime.service import FarmService
from yieldfarm.runtime.service import build_service as _build_service

log = logging.getLogger("yieldfarm.api")


def build_service() -> FarmService:
    """Build the FarmService for API runtime.

    This wrapper exists so tests can monkeypatch `yieldfarm.api.app.build_service`
    without reaching into runtime modules.
    """
    return _build_service(load_farm_config())


def _parse_cors_origins(mode: str) -> List[str]:
    """Parse CORS origins.

    Policy:
      - If YIELDFARM_CORS_ORIGINS is unset/empty -> CORS disabled
      - Wildcard "*" is rejected in prod mode
    """
    raw = os.environ.get("YIELDFARM_CORS_ORIGINS", "").strip()
    if not raw:
        return []

    origins = [o.strip() for o in raw.split(",") if o.strip()]

    if "*" in origins:
        if mode == "prod":
            raise RuntimeError(
                "Unsafe CORS configuration: wildcard '*' not allowed in production. "
                "Set explicit origins in YIELDFARM_CORS_ORIGINS."
            )
        return ["*"]

    return origins


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        request.state.error_code = exc.code
        return JSONResponse(status_code=exc.status_code, content=exc.to_json())

    @app.exception_handler(FarmError)
    async def _farm_error(request: Request, exc: FarmError) -> JSONResponse:
        err = ApiError.from_domain(exc)
        request.state.error_code = err.code
        log_event(log, "request_rejected", path=str(request.url.path or ""), code=err.code, reason=err.message)
        return JSONResponse(status_code=err.status_code, content=err.to_json())

    @app.exception_handler(TokenError)
    async def _token_error(request: Request, exc: TokenError) -> JSONResponse:
        err = ApiError.from_domain(exc)
        request.state.error_code = err.code
        log_event(log, "request_rejected", path=str(request.url.path or ""), code=err.code, reason=err.message)
        return JSONResponse(status_code=err.status_code, content=err.to_json())


def create_app(*, service: Optional[FarmService] = None, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    service:
      - explicit FarmService to serve (tests, embedding)
    boot_runtime:
      - True (default): load farm config and build a service via build_service()
      - False: no service attached; farm routes answer 500 not_ready
    """
    if service is None and boot_runtime:
        service = build_service()

    mode = str(service.cfg.mode if service is not None else os.environ.get("YIELDFARM_MODE", "prod")).strip().lower()

    # Disable docs in production.
    if mode == "prod":
        app = FastAPI(title="yieldfarm simulator", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="yieldfarm simulator")

    app.state.service = service

    # --- Middleware ---
    app.add_middleware(RequestLogMiddleware)

    cors_origins = _parse_cors_origins(mode)
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=cors_origins != ["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type"],
        )

    _install_error_handlers(app)

    # --- Routers ---
    app.include_router(public_router)

    return app
