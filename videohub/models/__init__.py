"""Models package exports."""

from videohub.models.auth import (
    ApiResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResult,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)
from videohub.models.result import ErrorKind, Failure, FailureReason, Result, Success
from videohub.models.user import User, UserRecord

__all__ = [
    "ApiResponse",
    "ChangePasswordRequest",
    "ErrorKind",
    "Failure",
    "FailureReason",
    "LoginRequest",
    "LoginResult",
    "RefreshRequest",
    "RegisterRequest",
    "Result",
    "Success",
    "TokenPair",
    "User",
    "UserRecord",
]
