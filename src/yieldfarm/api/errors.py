# src/yieldfarm/api/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from yieldfarm.farm.errors import FarmError
from yieldfarm.ledger.tokens import TokenError

_NOT_FOUND_CODES = {"unknown_pool", "unknown_asset"}
_FORBIDDEN_CODES = {"unauthorized", "not_dev_address", "not_minter", "not_owner"}
_CONFLICT_CODES = {"reentrant_call"}


@dataclass(frozen=True, slots=True)
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def forbidden(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(403, code, message, details or {})

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def conflict(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(409, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})

    @staticmethod
    def from_domain(exc: FarmError | TokenError) -> "ApiError":
        """Map a rejected farm/ledger operation onto an HTTP status."""
        code = str(exc.code)
        details = dict(exc.details or {})
        if code in _NOT_FOUND_CODES:
            return ApiError.not_found(code, exc.reason, details)
        if code in _FORBIDDEN_CODES:
            return ApiError.forbidden(code, exc.reason, details)
        if code in _CONFLICT_CODES:
            return ApiError.conflict(code, exc.reason, details)
        return ApiError.bad_request(code, exc.reason, details)

    def to_json(self) -> Dict[str, Any]:
        err: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            err["details"] = self.details
        return {"ok": False, "error": err}
