# src/yieldfarm/farm/__init__.py
"""
Farm core

  - schedule: staged emission multipliers and dev-fee divisors
  - early_bird: per-pool decaying score multiplier
  - pools / positions: the records settlement and staking mutate
  - accrual: lazy per-pool settlement against the capped reward ledger
  - access: role table gating privileged operations
  - engine: the Farm facade tying it together
"""

from __future__ import annotations

from yieldfarm.farm.clock import Clock, ManualClock
from yieldfarm.farm.engine import Farm
from yieldfarm.farm.errors import FarmError

__all__ = ["Clock", "Farm", "FarmError", "ManualClock"]
