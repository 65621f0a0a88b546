# src/yieldfarm/api/routes_public_parts/roles.py
from __future__ import annotations

from fastapi import APIRouter, Request

from yieldfarm.api.routes_public_parts.common import _service
from yieldfarm.api.schemas import RoleRequest

router = APIRouter()


@router.get("/v1/roles")
def v1_roles(request: Request):
    svc = _service(request)
    with svc.lock:
        return {"ok": True, "roles": svc.farm.access.to_json()}


@router.get("/v1/roles/{role}/{account}")
def v1_role_check(role: str, account: str, request: Request):
    svc = _service(request)
    with svc.lock:
        return {"ok": True, "role": role, "account": account, "has_role": svc.farm.has_role(role, account)}


@router.post("/v1/roles/grant")
def v1_role_grant(body: RoleRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        changed = svc.farm.grant_role(body.caller, body.role, body.account)
        return {"ok": True, "changed": changed}


@router.post("/v1/roles/revoke")
def v1_role_revoke(body: RoleRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        changed = svc.farm.revoke_role(body.caller, body.role, body.account)
        return {"ok": True, "changed": changed}


@router.post("/v1/roles/renounce")
def v1_role_renounce(body: RoleRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        changed = svc.farm.renounce_role(body.caller, body.role, body.account)
        return {"ok": True, "changed": changed}
