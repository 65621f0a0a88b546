# src/yieldfarm/__init__.py
"""
yieldfarm: staking farm with scheduled, capped reward emission

Packages:
  - farm: pools, positions, reward schedule, early-bird scoring, accrual and the Farm facade
  - ledger: token ledgers the farm custodies and mints through
  - runtime: config, structured logging, metrics and service wiring
  - api: FastAPI simulator over an in-memory farm
"""

from __future__ import annotations

__all__ = ["farm", "ledger", "runtime", "api"]
