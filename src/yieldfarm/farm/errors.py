from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

Json = Dict[str, Any]


@dataclass
class FarmError(Exception):
    """Canonical error type for rejected farm operations."""

    code: str
    reason: str
    details: Json = field(default_factory=dict)

    def __str__(self) -> str:
        if not self.details:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class UnknownPool(FarmError):
    pass


class DuplicateStakedAsset(FarmError):
    pass


class Unauthorized(FarmError):
    pass


class InsufficientStake(FarmError):
    pass


class NotDevAddress(FarmError):
    pass


class InvalidPoolConfig(FarmError):
    pass


class ReentrantCall(FarmError):
    pass


def unknown_pool(pool_id: Any) -> UnknownPool:
    return UnknownPool("unknown_pool", "pool_not_found", {"pool_id": pool_id})


def unauthorized(operation: str, caller: str) -> Unauthorized:
    return Unauthorized("unauthorized", f"{operation}:not_authorized", {"operation": operation, "caller": caller})
