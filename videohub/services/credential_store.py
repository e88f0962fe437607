"""PostgreSQL-backed storage for user credentials and refresh tokens."""

import asyncio
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
import structlog

from videohub.database import get_pool
from videohub.models.user import UserRecord

logger = structlog.get_logger(__name__)

_USER_COLUMNS = (
    "id, username, email, full_name, password_hash, refresh_token, created_at, updated_at"
)

# Failures that mean the store could not complete the call
_STORE_FAILURES = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
    RuntimeError,  # pool not initialized
)


class CredentialStoreError(Exception):
    """The credential store could not complete an operation."""


class DuplicateUserError(CredentialStoreError):
    """A user with the same username or email already exists."""


def _record_from_row(row) -> UserRecord:
    return UserRecord(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        refresh_token=row["refresh_token"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _rows_affected(status: str) -> int:
    """Parse asyncpg's command status, e.g. 'UPDATE 1'."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


class CredentialStore:
    """Reads and writes the credential fields of the users table.

    Every database failure is raised as CredentialStoreError so callers
    can report it without knowing about asyncpg.
    """

    async def find_by_id(self, user_id: UUID) -> Optional[UserRecord]:
        """Get a user by UUID.

        Returns:
            UserRecord or None if not found
        """
        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1",
                    user_id,
                )
        except _STORE_FAILURES as e:
            logger.error("credential_lookup_failed", user_id=str(user_id), error=str(e))
            raise CredentialStoreError("Failed to load user") from e

        return _record_from_row(row) if row is not None else None

    async def find_by_username_or_email(
        self, username: Optional[str], email: Optional[str]
    ) -> Optional[UserRecord]:
        """Get a user whose username or email matches (case-insensitive).

        Stored values are lower-cased, so the inputs are lower-cased here.
        An email match wins over a username match.

        Returns:
            UserRecord or None if not found
        """
        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_USER_COLUMNS}
                    FROM users
                    WHERE username = LOWER($1::text) OR email = LOWER($2::text)
                    ORDER BY (email = LOWER($2::text)) DESC
                    LIMIT 1
                    """,
                    username,
                    email,
                )
        except _STORE_FAILURES as e:
            logger.error("credential_lookup_failed", error=str(e))
            raise CredentialStoreError("Failed to look up user") from e

        return _record_from_row(row) if row is not None else None

    async def create_user(
        self,
        username: str,
        email: str,
        full_name: str,
        password_hash: str,
    ) -> UserRecord:
        """Insert a new user.

        Args:
            username: Lower-cased unique username
            email: Lower-cased unique email
            full_name: Display name
            password_hash: Bcrypt hash of the password

        Raises:
            DuplicateUserError: If the username or email is taken
            CredentialStoreError: If the insert fails for any other reason
        """
        user_id = uuid4()
        now = datetime.now(timezone.utc)

        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO users (id, username, email, full_name, password_hash, refresh_token, created_at, updated_at)
                    VALUES ($1, $2, $3, $4, $5, NULL, $6, $7)
                    RETURNING {_USER_COLUMNS}
                    """,
                    user_id,
                    username,
                    email,
                    full_name,
                    password_hash,
                    now,
                    now,
                )
        except asyncpg.UniqueViolationError as e:
            logger.info("user_create_duplicate", username=username)
            raise DuplicateUserError("User with email or username already exists") from e
        except _STORE_FAILURES as e:
            logger.error("user_create_failed", username=username, error=str(e))
            raise CredentialStoreError("Failed to create user") from e

        logger.info("user_created", user_id=str(user_id), username=username)
        return _record_from_row(row)

    async def update_refresh_token(
        self,
        user_id: UUID,
        token: Optional[str],
        expected: Optional[str] = None,
    ) -> bool:
        """Store (or clear, with None) the user's refresh token.

        With ``expected`` set, the write only happens if the stored token
        still equals it, as a single conditional UPDATE.

        Returns:
            True if a row was updated; False if the user is gone or the
            stored token no longer matches ``expected``
        """
        now = datetime.now(timezone.utc)

        if expected is None:
            query = """
                UPDATE users
                SET refresh_token = $1, updated_at = $2
                WHERE id = $3
            """
            params = (token, now, user_id)
        else:
            query = """
                UPDATE users
                SET refresh_token = $1, updated_at = $2
                WHERE id = $3 AND refresh_token = $4
            """
            params = (token, now, user_id, expected)

        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                status = await conn.execute(query, *params)
        except _STORE_FAILURES as e:
            logger.error("refresh_token_write_failed", user_id=str(user_id), error=str(e))
            raise CredentialStoreError("Failed to store refresh token") from e

        return _rows_affected(status) == 1

    async def update_password_hash(self, user_id: UUID, password_hash: str) -> bool:
        """Replace the user's password hash.

        Returns:
            True if the user existed and was updated
        """
        now = datetime.now(timezone.utc)

        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                status = await conn.execute(
                    """
                    UPDATE users
                    SET password_hash = $1, updated_at = $2
                    WHERE id = $3
                    """,
                    password_hash,
                    now,
                    user_id,
                )
        except _STORE_FAILURES as e:
            logger.error("password_write_failed", user_id=str(user_id), error=str(e))
            raise CredentialStoreError("Failed to update password") from e

        return _rows_affected(status) == 1
