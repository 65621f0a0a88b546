from __future__ import annotations

from typing import Protocol


class Clock(Protocol):
    """Source of the current height. Heights never decrease."""

    @property
    def height(self) -> int: ...


class ManualClock:
    """Explicitly driven height counter (tests, simulator)."""

    def __init__(self, height: int = 0) -> None:
        h = int(height)
        if h < 0:
            raise ValueError(f"height must be >= 0; got: {height}")
        self._height = h

    @property
    def height(self) -> int:
        return self._height

    def advance_to(self, height: int) -> int:
        h = int(height)
        if h < self._height:
            raise ValueError(f"clock cannot move backwards: {self._height} -> {h}")
        self._height = h
        return self._height

    def advance(self, blocks: int = 1) -> int:
        n = int(blocks)
        if n < 0:
            raise ValueError(f"blocks must be >= 0; got: {blocks}")
        self._height += n
        return self._height
