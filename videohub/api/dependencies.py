"""FastAPI dependencies for session wiring and authentication."""

from typing import Optional
from uuid import UUID

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from videohub.api.errors import raise_for, unauthorized
from videohub.config import get_settings
from videohub.models.result import ErrorKind
from videohub.models.user import User
from videohub.services.credential_store import CredentialStore
from videohub.services.session_manager import SessionManager
from videohub.services.token_service import TokenConfig, TokenIssuer, TokenType, TokenVerifier

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_manager() -> SessionManager:
    """Build the session manager from settings (composition root)."""
    settings = get_settings()
    config = TokenConfig.from_settings(settings)
    return SessionManager(
        store=CredentialStore(),
        issuer=TokenIssuer(config),
        verifier=TokenVerifier(config),
        bcrypt_rounds=settings.bcrypt_rounds,
    )


async def get_current_user(
    access_token: Optional[str] = Cookie(default=None, alias="accessToken"),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session_manager: SessionManager = Depends(get_session_manager),
) -> User:
    """Resolve the user from the accessToken cookie or a Bearer header.

    Raises:
        HTTPException 401: If the token is missing, invalid, expired, or the
            user no longer exists
        HTTPException 500: If the user could not be loaded
    """
    token = access_token or (credentials.credentials if credentials else None)
    if not token:
        raise unauthorized("Unauthorized request")

    decoded = session_manager.verifier.verify_and_decode(token, TokenType.ACCESS)
    if not decoded.ok:
        raise unauthorized(decoded.message)

    try:
        user_id = UUID(decoded.value["_id"])
    except ValueError:
        raise unauthorized("Invalid access token")

    result = await session_manager.current_user(user_id)
    if not result.ok:
        if result.kind is ErrorKind.NOT_FOUND:
            raise unauthorized("Invalid access token")
        raise_for(result)

    return result.value
