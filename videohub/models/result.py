"""Explicit success/failure results returned by the session core."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Stable error taxonomy surfaced to callers."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    INTERNAL_ERROR = "internal_error"


class FailureReason(str, Enum):
    """Machine-readable detail behind a failure, mostly for logs and tests."""

    MISSING_FIELD = "missing_field"
    MISSING_TOKEN = "missing_token"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    MALFORMED = "malformed"
    TOKEN_REUSED = "token_reused"
    UNKNOWN_USER = "unknown_user"
    BAD_CREDENTIALS = "bad_credentials"
    DUPLICATE_USER = "duplicate_user"
    STORE_ERROR = "store_error"


@dataclass(frozen=True)
class Success(Generic[T]):
    """A successful outcome carrying its value (None for bodiless results)."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A failed outcome.

    Attributes:
        kind: Error category callers branch on
        message: Human-readable explanation, safe to return to clients
        reason: Finer-grained cause (e.g. expired vs invalid_signature)
    """

    kind: ErrorKind
    message: str
    reason: Optional[FailureReason] = None

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure]


def validation_error(message: str, reason: FailureReason = FailureReason.MISSING_FIELD) -> Failure:
    return Failure(ErrorKind.VALIDATION_ERROR, message, reason)


def not_found(message: str) -> Failure:
    return Failure(ErrorKind.NOT_FOUND, message, FailureReason.UNKNOWN_USER)


def unauthorized(message: str, reason: Optional[FailureReason] = None) -> Failure:
    return Failure(ErrorKind.UNAUTHORIZED, message, reason)


def conflict(message: str) -> Failure:
    return Failure(ErrorKind.CONFLICT, message, FailureReason.DUPLICATE_USER)


def internal_error(message: str) -> Failure:
    return Failure(ErrorKind.INTERNAL_ERROR, message, FailureReason.STORE_ERROR)
