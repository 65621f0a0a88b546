# src/yieldfarm/runtime/config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from yieldfarm.ledger.constants import REWARD_ASSET_ID, REWARD_CAP

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_balances(v: Any) -> Dict[str, Dict[str, int]]:
    """asset_id -> {account: balance}; malformed entries are rejected by validation."""
    if not isinstance(v, dict):
        return {}
    out: Dict[str, Dict[str, int]] = {}
    for asset_id, balances in v.items():
        if not isinstance(balances, dict):
            raise ValueError(f"staked_assets[{asset_id!r}] must be an object of balances")
        out[str(asset_id)] = {str(acct): _as_int(bal, -1) for acct, bal in balances.items()}
    return out


@dataclass(frozen=True)
class FarmConfig:
    farm_id: str
    mode: str  # "dev" | "testnet" | "prod"

    base_rate_per_height: int
    start_height: int
    bonus_end_height: int
    dev_bonus_end_height: int

    dev_address: str
    owner: str

    reward_cap: int
    reward_asset_id: str

    api_host: str
    api_port: int

    log_level: str

    # Simulator seed balances for staked assets.
    staked_assets: Dict[str, Dict[str, int]] = field(default_factory=dict)


_ALLOWED_MODES = {"dev", "testnet", "prod"}


def validate_farm_config(cfg: FarmConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.farm_id, str) or not cfg.farm_id.strip():
        raise ValueError("farm_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if int(cfg.base_rate_per_height) < 0:
        raise ValueError(f"base_rate_per_height must be >= 0; got: {cfg.base_rate_per_height}")

    if int(cfg.start_height) < 0:
        raise ValueError(f"start_height must be >= 0; got: {cfg.start_height}")
    if int(cfg.bonus_end_height) < int(cfg.start_height):
        raise ValueError(
            f"bonus_end_height must be >= start_height; got: {cfg.bonus_end_height} < {cfg.start_height}"
        )
    if int(cfg.dev_bonus_end_height) < int(cfg.start_height):
        raise ValueError(
            f"dev_bonus_end_height must be >= start_height; got: {cfg.dev_bonus_end_height} < {cfg.start_height}"
        )

    for name, v in (("dev_address", cfg.dev_address), ("owner", cfg.owner), ("reward_asset_id", cfg.reward_asset_id)):
        if not isinstance(v, str) or not v.strip():
            raise ValueError(f"{name} must be a non-empty string")

    if int(cfg.reward_cap) <= 0:
        raise ValueError(f"reward_cap must be > 0; got: {cfg.reward_cap}")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")

    for asset_id, balances in cfg.staked_assets.items():
        if asset_id == cfg.reward_asset_id:
            raise ValueError(f"staked asset {asset_id!r} collides with reward_asset_id")
        for acct, bal in balances.items():
            if int(bal) < 0:
                raise ValueError(f"staked_assets[{asset_id!r}][{acct!r}] must be a non-negative int")


def default_farm_config() -> FarmConfig:
    return FarmConfig(
        farm_id="yieldfarm-dev",
        # Without an explicit config file the simulator's clock endpoint stays closed.
        mode="prod",
        base_rate_per_height=100,
        start_height=0,
        bonus_end_height=40_000,
        dev_bonus_end_height=80_000,
        dev_address="dev",
        owner="owner",
        reward_cap=REWARD_CAP,
        reward_asset_id=REWARD_ASSET_ID,
        api_host="127.0.0.1",
        api_port=8080,
        log_level="INFO",
        staked_assets={},
    )


def farm_config_from_json(raw: Json) -> FarmConfig:
    if not isinstance(raw, dict):
        raise ValueError("farm config must be a JSON object")

    d = default_farm_config()

    cfg = FarmConfig(
        farm_id=_as_str(raw.get("farm_id"), d.farm_id),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        base_rate_per_height=_as_int(raw.get("base_rate_per_height"), d.base_rate_per_height),
        start_height=_as_int(raw.get("start_height"), d.start_height),
        bonus_end_height=_as_int(raw.get("bonus_end_height"), d.bonus_end_height),
        dev_bonus_end_height=_as_int(raw.get("dev_bonus_end_height"), d.dev_bonus_end_height),
        dev_address=_as_str(raw.get("dev_address"), d.dev_address),
        owner=_as_str(raw.get("owner"), d.owner),
        reward_cap=_as_int(raw.get("reward_cap"), d.reward_cap),
        reward_asset_id=_as_str(raw.get("reward_asset_id"), d.reward_asset_id),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port),
        log_level=_as_str(raw.get("log_level"), d.log_level),
        staked_assets=_as_balances(raw.get("staked_assets")),
    )

    validate_farm_config(cfg)
    return cfg


def read_farm_config_file(path: str) -> FarmConfig:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return farm_config_from_json(raw)


def load_farm_config(*, config_path: Optional[str] = None) -> FarmConfig:
    p = config_path or os.environ.get("YIELDFARM_CONFIG_PATH")
    if p:
        return read_farm_config_file(p)

    cfg = default_farm_config()
    validate_farm_config(cfg)
    return cfg


def apply_farm_config_to_env(cfg: FarmConfig) -> None:
    validate_farm_config(cfg)
    os.environ["YIELDFARM_FARM_ID"] = cfg.farm_id
    os.environ["YIELDFARM_MODE"] = (cfg.mode or "prod").strip().lower()
    os.environ["YIELDFARM_API_HOST"] = cfg.api_host
    os.environ["YIELDFARM_API_PORT"] = str(int(cfg.api_port))
    os.environ["YIELDFARM_LOG_LEVEL"] = cfg.log_level
