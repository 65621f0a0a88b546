from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterator, Optional, Tuple

from yieldfarm.farm.constants import PRECISION

Json = Dict[str, Any]


@dataclass
class Position:
    pool_id: int
    holder: str
    amount: int = 0
    score: int = 0
    reward_debt: int = 0
    qualified_early: bool = False
    recorded_multiplier: int = PRECISION

    def accrued(self, acc_reward_per_score: int) -> int:
        return self.score * int(acc_reward_per_score) // PRECISION

    def to_json(self) -> Json:
        return asdict(self)


class PositionLedger:
    """Per (pool, holder) positions. Records persist after a full exit."""

    def __init__(self) -> None:
        self._positions: Dict[Tuple[int, str], Position] = {}
        self._journal: Optional[Dict[Tuple[int, str], Optional[Position]]] = None

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[Position]:
        return iter(self._positions.values())

    def peek(self, pool_id: int, holder: str) -> Position:
        """Read-only lookup; unknown positions come back as a fresh zero record."""
        pos = self._positions.get((int(pool_id), str(holder)))
        if pos is None:
            return Position(pool_id=int(pool_id), holder=str(holder))
        return pos

    def touch(self, pool_id: int, holder: str) -> Position:
        key = (int(pool_id), str(holder))
        pos = self._positions.get(key)
        if self._journal is not None and key not in self._journal:
            self._journal[key] = None if pos is None else replace(pos)
        if pos is None:
            pos = Position(pool_id=int(pool_id), holder=str(holder))
            self._positions[key] = pos
        return pos

    # ---- undo journal: only positions touched since begin() are recorded ----

    def begin(self) -> None:
        self._journal = {}

    def commit(self) -> None:
        self._journal = None

    def rollback(self) -> None:
        for key, prev in (self._journal or {}).items():
            if prev is None:
                self._positions.pop(key, None)
            else:
                self._positions[key] = prev
        self._journal = None
