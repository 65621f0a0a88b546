# src/yieldfarm/api/routes_public_parts/tokens.py
from __future__ import annotations

from fastapi import APIRouter, Request

from yieldfarm.api.routes_public_parts.common import _require_non_prod, _service
from yieldfarm.api.schemas import ApproveRequest, FaucetRequest

router = APIRouter()


@router.get("/v1/tokens")
def v1_tokens(request: Request):
    svc = _service(request)
    with svc.lock:
        reward = svc.reward_token
        return {
            "ok": True,
            "reward": {"asset_id": reward.asset_id, "total_supply": reward.total_supply, "cap": reward.cap},
            "staked": [{"asset_id": t.asset_id, "total_supply": t.total_supply} for _, t in sorted(svc.tokens.items())],
        }


@router.get("/v1/tokens/{asset_id}/balances/{account}")
def v1_token_balance(asset_id: str, account: str, request: Request):
    svc = _service(request)
    with svc.lock:
        return {"ok": True, "asset_id": asset_id, "account": account, "balance": svc.token(asset_id).balance_of(account)}


@router.post("/v1/tokens/{asset_id}/approve")
def v1_token_approve(asset_id: str, body: ApproveRequest, request: Request):
    svc = _service(request)
    with svc.lock:
        token = svc.token(asset_id)
        token.approve(body.owner, body.spender, body.amount)
        return {"ok": True, "allowance": token.allowance(body.owner, body.spender)}


@router.post("/v1/tokens/{asset_id}/faucet")
def v1_token_faucet(asset_id: str, body: FaucetRequest, request: Request):
    """Issue staked-asset units to an account. Non-prod only; never the reward asset."""
    svc = _service(request)
    _require_non_prod(svc, "faucet")
    with svc.lock:
        token = svc.staked_token(asset_id)
        token.issue(body.account, body.amount)
        return {"ok": True, "asset_id": token.asset_id, "balance": token.balance_of(body.account)}
