# spacetime/core/errors.py
# -----------------------------------------------------------------------------
# Error taxonomy for the space-time foundation
#
# • ErrorCode: the closed set of failure codes every fallible operation uses
# • Result: success/failure value returned instead of raising for domain faults
# • SpaceTimeException: categorized exceptions reserved for programmer errors
#   (accessors before initialize, disposed instances, writes through a view)
# -----------------------------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    INVALID_TIME_RANGE = "INVALID_TIME_RANGE"
    TIME_DISCONTINUITY = "TIME_DISCONTINUITY"
    INVALID_SPEED_MULTIPLIER = "INVALID_SPEED_MULTIPLIER"
    BODY_NOT_SUPPORTED = "BODY_NOT_SUPPORTED"
    TIME_OUT_OF_RANGE = "TIME_OUT_OF_RANGE"
    CALCULATION_FAILED = "CALCULATION_FAILED"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    INVALID_BODY_ID = "INVALID_BODY_ID"
    INVALID_JULIAN_DATE = "INVALID_JULIAN_DATE"
    UNAUTHORIZED_ACCESS = "UNAUTHORIZED_ACCESS"
    MULTIPLE_AUTHORITATIVE_FRAMES = "MULTIPLE_AUTHORITATIVE_FRAMES"
    NOT_INITIALIZED = "NOT_INITIALIZED"
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"


@dataclass(frozen=True)
class SpaceTimeError:
    code: ErrorCode
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            out["details"] = dict(self.details)
        return out


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either ``success`` with ``data`` or a failure carrying ``error``; never both."""
    success: bool
    data: Optional[T] = None
    error: Optional[SpaceTimeError] = field(default=None)

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("successful Result cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("failed Result requires an error")

    @property
    def code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error is not None else None

    def unwrap(self) -> T:
        if not self.success:
            assert self.error is not None
            raise ResultError(self.error.code, self.error.message, **(self.error.details or {}))
        return self.data  # type: ignore[return-value]

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        assert self.error is not None
        return {"success": False, "error": self.error.to_dict()}


def ok(data: Any = None) -> Result:
    return Result(success=True, data=data)


def fail(code: ErrorCode, message: str, **details: Any) -> Result:
    return Result(success=False, error=SpaceTimeError(code, message, details or None))


# ─────────────────────────────────────────────────────────────────────────────
# Exceptions
# ─────────────────────────────────────────────────────────────────────────────
class SpaceTimeException(RuntimeError):
    """Categorized error for misuse of the foundation API."""
    def __init__(self, code: ErrorCode, message: str, **context: Any):
        super().__init__(f"{code.value}: {message}")
        self.code = code
        self.message = message
        self.context = context


class NotInitializedError(SpaceTimeException):
    def __init__(self, message: str = "Space-Time Core not initialized", **context: Any):
        super().__init__(ErrorCode.NOT_INITIALIZED, message, **context)


class DisposedError(SpaceTimeException):
    def __init__(self, message: str = "instance has been disposed", **context: Any):
        super().__init__(ErrorCode.NOT_INITIALIZED, message, **context)


class UnauthorizedAccessError(SpaceTimeException):
    def __init__(self, message: str, **context: Any):
        super().__init__(ErrorCode.UNAUTHORIZED_ACCESS, message, **context)


class ResultError(SpaceTimeException):
    """Raised by ``Result.unwrap()`` on a failed result."""


__all__ = [
    "ErrorCode",
    "SpaceTimeError",
    "Result",
    "ok",
    "fail",
    "SpaceTimeException",
    "NotInitializedError",
    "DisposedError",
    "UnauthorizedAccessError",
    "ResultError",
]
