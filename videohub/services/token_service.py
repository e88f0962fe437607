"""JWT issuing and verification for access and refresh tokens."""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict

import jwt
import structlog

from videohub.config import Settings
from videohub.models.result import FailureReason, Result, Success, unauthorized
from videohub.models.user import UserRecord

logger = structlog.get_logger(__name__)

JWT_ALGORITHM = "HS256"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenConfig:
    """Signing keys and lifetimes for both token kinds.

    Raises:
        ValueError: If a secret is empty or a lifetime is not positive
    """

    access_secret: str
    access_ttl: timedelta
    refresh_secret: str
    refresh_ttl: timedelta

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Token secrets must be configured")
        if self.access_ttl.total_seconds() <= 0 or self.refresh_ttl.total_seconds() <= 0:
            raise ValueError("Token lifetimes must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            access_secret=settings.access_token_secret,
            access_ttl=settings.access_token_expiry,
            refresh_secret=settings.refresh_token_secret,
            refresh_ttl=settings.refresh_token_expiry,
        )

    def secret_for(self, token_type: TokenType) -> str:
        if token_type is TokenType.ACCESS:
            return self.access_secret
        return self.refresh_secret


class TokenIssuer:
    """Creates signed, time-bounded access and refresh tokens."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def issue_access_token(self, user: UserRecord) -> str:
        """Create a signed access token carrying the user's identity claims.

        Args:
            user: User whose id, email, username and full name are embedded

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "_id": str(user.id),
            "email": user.email,
            "username": user.username,
            "fullName": user.full_name,
            "type": TokenType.ACCESS.value,
            "iat": now,
            "exp": now + self.config.access_ttl,
        }
        token = jwt.encode(payload, self.config.access_secret, algorithm=JWT_ALGORITHM)
        logger.debug(
            "access_token_issued",
            user_id=str(user.id),
            expires_seconds=int(self.config.access_ttl.total_seconds()),
        )
        return token

    def issue_refresh_token(self, user_id: Any) -> str:
        """Create a signed refresh token carrying only the user id.

        A random jti makes every refresh token unique, even when two are
        minted for the same user within the same second.

        Args:
            user_id: User UUID (or its string form)

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "_id": str(user_id),
            "type": TokenType.REFRESH.value,
            "jti": secrets.token_hex(16),
            "iat": now,
            "exp": now + self.config.refresh_ttl,
        }
        token = jwt.encode(payload, self.config.refresh_secret, algorithm=JWT_ALGORITHM)
        logger.debug(
            "refresh_token_issued",
            user_id=str(user_id),
            expires_seconds=int(self.config.refresh_ttl.total_seconds()),
        )
        return token


class TokenVerifier:
    """Validates token signature, expiry and shape."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def verify_and_decode(
        self, token: str, token_type: TokenType = TokenType.REFRESH
    ) -> Result[Dict[str, Any]]:
        """Decode a token signed with the key for ``token_type``.

        Returns:
            Success with the claims, or an Unauthorized failure whose reason is
            EXPIRED, INVALID_SIGNATURE or MALFORMED
        """
        label = token_type.value.capitalize()

        if not isinstance(token, str) or not token:
            return unauthorized(f"{label} token is missing", FailureReason.MISSING_TOKEN)

        try:
            payload = jwt.decode(
                token,
                self.config.secret_for(token_type),
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("token_expired", kind=token_type.value)
            return unauthorized(f"{label} token has expired", FailureReason.EXPIRED)
        except jwt.InvalidSignatureError:
            logger.warning("token_bad_signature", kind=token_type.value)
            return unauthorized(
                f"Invalid {token_type.value} token", FailureReason.INVALID_SIGNATURE
            )
        except jwt.InvalidTokenError as e:
            logger.warning("token_malformed", kind=token_type.value, error=str(e))
            return unauthorized(f"Invalid {token_type.value} token", FailureReason.MALFORMED)

        if payload.get("type") != token_type.value or not isinstance(payload.get("_id"), str):
            logger.warning("token_wrong_shape", kind=token_type.value)
            return unauthorized(f"Invalid {token_type.value} token", FailureReason.MALFORMED)

        return Success(payload)
