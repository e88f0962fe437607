"""Login, refresh, logout and password-change orchestration.

The session manager is the only writer of a user's refresh token. A user
has at most one valid refresh token: the value currently stored. Refreshing
rotates it with a compare-and-swap keyed on the presented token, so a token
that was rotated away or cleared by logout can never be exchanged again.

Every operation returns a Result; store failures are reported as
InternalError and nothing here is retried.
"""

import secrets
from typing import Optional
from uuid import UUID

import structlog

from videohub.models.auth import LoginResult, TokenPair
from videohub.models.result import (
    FailureReason,
    Result,
    Success,
    conflict,
    internal_error,
    not_found,
    unauthorized,
    validation_error,
)
from videohub.models.user import User, UserRecord
from videohub.services.credential_store import (
    CredentialStore,
    CredentialStoreError,
    DuplicateUserError,
)
from videohub.services.password_hasher import (
    DEFAULT_ROUNDS,
    MAX_PASSWORD_BYTES,
    hash_password,
    password_too_long,
    verify_password,
)
from videohub.services.token_service import TokenIssuer, TokenType, TokenVerifier

logger = structlog.get_logger(__name__)

TOKEN_GENERATION_FAILED = "Something went wrong while generating refresh and access token"
TOKEN_REUSED = "Refresh token is expired or used"


def _is_blank(value: Optional[str]) -> bool:
    return not isinstance(value, str) or not value.strip()


def _tokens_match(presented: str, stored: Optional[str]) -> bool:
    if not stored:
        return False
    return secrets.compare_digest(presented.encode("utf-8"), stored.encode("utf-8"))


class SessionManager:
    """Orchestrates credential checks, token issuance and refresh-token state."""

    def __init__(
        self,
        store: CredentialStore,
        issuer: TokenIssuer,
        verifier: TokenVerifier,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ):
        self.store = store
        self.issuer = issuer
        self.verifier = verifier
        self.bcrypt_rounds = bcrypt_rounds

    async def register(
        self,
        full_name: Optional[str],
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> Result[User]:
        """Create an account with a freshly hashed password.

        Username and email are trimmed and lower-cased before the uniqueness
        check and insert.
        """
        if any(_is_blank(field) for field in (full_name, username, email, password)):
            return validation_error("All fields are required")
        if password_too_long(password):
            return validation_error(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                FailureReason.MALFORMED,
            )

        username = username.strip().lower()
        email = email.strip().lower()
        full_name = full_name.strip()

        # Login matches one identifier against both columns
        if "@" in username:
            return validation_error("Username must not contain '@'")

        try:
            existing = await self.store.find_by_username_or_email(username, email)
            if existing is not None:
                return conflict("User with email or username already exists")

            record = await self.store.create_user(
                username=username,
                email=email,
                full_name=full_name,
                password_hash=hash_password(password, self.bcrypt_rounds),
            )
        except DuplicateUserError:
            return conflict("User with email or username already exists")
        except (CredentialStoreError, ValueError):
            return internal_error("Something went wrong while registering the user")

        logger.info("user_registered", user_id=str(record.id), username=record.username)
        return Success(record.to_user())

    async def login(self, identifier: Optional[str], password: Optional[str]) -> Result[LoginResult]:
        """Authenticate by username or email and start a new session.

        The new refresh token overwrites whatever was stored, so a second
        login invalidates the refresh token handed out by the first.
        """
        if _is_blank(identifier):
            return validation_error("Username or email is required")

        identifier = identifier.strip()

        try:
            record = await self.store.find_by_username_or_email(identifier, identifier)
        except CredentialStoreError:
            return internal_error("Something went wrong while logging in")

        if record is None:
            logger.info("login_unknown_user")
            return not_found("User does not exist")

        if not verify_password(password or "", record.password_hash):
            logger.warning("login_bad_password", user_id=str(record.id))
            return unauthorized("Invalid user credentials", FailureReason.BAD_CREDENTIALS)

        access_token = self.issuer.issue_access_token(record)
        refresh_token = self.issuer.issue_refresh_token(record.id)

        try:
            stored = await self.store.update_refresh_token(record.id, refresh_token)
        except CredentialStoreError:
            return internal_error(TOKEN_GENERATION_FAILED)
        if not stored:
            logger.error("login_refresh_token_not_stored", user_id=str(record.id))
            return internal_error(TOKEN_GENERATION_FAILED)

        logger.info("user_logged_in", user_id=str(record.id), username=record.username)
        return Success(
            LoginResult(
                access_token=access_token,
                refresh_token=refresh_token,
                user=record.to_user(),
            )
        )

    async def refresh(self, presented_token: Optional[str]) -> Result[TokenPair]:
        """Exchange the current refresh token for a new token pair.

        Rejects expired, forged and malformed tokens, and any token that no
        longer matches the stored value (rotated away or logged out).
        """
        if _is_blank(presented_token):
            return unauthorized("Unauthorized request", FailureReason.MISSING_TOKEN)

        decoded = self.verifier.verify_and_decode(presented_token, TokenType.REFRESH)
        if not decoded.ok:
            return decoded

        try:
            user_id = UUID(decoded.value["_id"])
        except ValueError:
            return unauthorized("Invalid refresh token", FailureReason.MALFORMED)

        try:
            record = await self.store.find_by_id(user_id)
        except CredentialStoreError:
            return internal_error("Something went wrong while refreshing the session")

        if record is None:
            logger.warning("refresh_unknown_user", user_id=str(user_id))
            return unauthorized("Invalid refresh token", FailureReason.UNKNOWN_USER)

        if not _tokens_match(presented_token, record.refresh_token):
            logger.warning("refresh_token_reused", user_id=str(user_id))
            return unauthorized(TOKEN_REUSED, FailureReason.TOKEN_REUSED)

        access_token = self.issuer.issue_access_token(record)
        new_refresh_token = self.issuer.issue_refresh_token(record.id)

        try:
            swapped = await self.store.update_refresh_token(
                record.id, new_refresh_token, expected=presented_token
            )
        except CredentialStoreError:
            return internal_error(TOKEN_GENERATION_FAILED)

        if not swapped:
            # Another request rotated or cleared the token since we read it
            logger.warning("refresh_token_race_lost", user_id=str(user_id))
            return unauthorized(TOKEN_REUSED, FailureReason.TOKEN_REUSED)

        logger.info("access_token_refreshed", user_id=str(user_id))
        return Success(TokenPair(access_token=access_token, refresh_token=new_refresh_token))

    async def logout(self, user_id: UUID) -> Result[None]:
        """Clear the stored refresh token, revoking the current session."""
        try:
            await self.store.update_refresh_token(user_id, None)
        except CredentialStoreError:
            return internal_error("Something went wrong while logging out")

        logger.info("user_logged_out", user_id=str(user_id))
        return Success(None)

    async def change_password(
        self,
        user_id: UUID,
        current_password: Optional[str],
        new_password: Optional[str],
    ) -> Result[None]:
        """Replace the password after checking the current one.

        Existing refresh tokens are left valid.
        """
        if _is_blank(new_password):
            return validation_error("New password is required")
        if password_too_long(new_password):
            return validation_error(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                FailureReason.MALFORMED,
            )

        try:
            record = await self.store.find_by_id(user_id)
        except CredentialStoreError:
            return internal_error("Something went wrong while changing the password")

        if record is None:
            return not_found("User does not exist")

        if not verify_password(current_password or "", record.password_hash):
            logger.warning("change_password_bad_password", user_id=str(user_id))
            return unauthorized("Invalid current password", FailureReason.BAD_CREDENTIALS)

        try:
            updated = await self.store.update_password_hash(
                user_id, hash_password(new_password, self.bcrypt_rounds)
            )
        except (CredentialStoreError, ValueError):
            return internal_error("Something went wrong while changing the password")

        if not updated:
            return not_found("User does not exist")

        logger.info("password_changed", user_id=str(user_id))
        return Success(None)

    async def current_user(self, user_id: UUID) -> Result[User]:
        """Return the public view of a user."""
        try:
            record: Optional[UserRecord] = await self.store.find_by_id(user_id)
        except CredentialStoreError:
            return internal_error("Something went wrong while fetching the user")

        if record is None:
            return not_found("User does not exist")
        return Success(record.to_user())
