"""Auth request and response models."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from videohub.models.user import User


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """New account details.

    Blank values are rejected by the session manager, not here, so that
    every missing field yields the same validation message.
    """

    full_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(CamelModel):
    """Login credentials; either username or email identifies the account."""

    username: Optional[str] = None
    email: Optional[str] = None
    password: str = ""

    @property
    def identifier(self) -> str:
        return (self.username or self.email or "").strip()


class RefreshRequest(CamelModel):
    """Body form of the refresh token (the cookie takes precedence)."""

    refresh_token: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    current_password: str = ""
    new_password: str = ""


class TokenPair(CamelModel):
    """A freshly issued access/refresh token pair."""

    access_token: str
    refresh_token: str


class LoginResult(TokenPair):
    """Token pair plus the authenticated user."""

    user: User


class ApiResponse(CamelModel):
    """Response envelope shared by all user endpoints."""

    status_code: int
    data: Any = None
    message: str = "Success"
    success: bool = True
    errors: Optional[List[Any]] = None
