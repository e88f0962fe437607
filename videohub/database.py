"""asyncpg pool for the users table and its SQL migrations."""

import asyncio
from pathlib import Path
from typing import List, Optional

import asyncpg
import structlog

from videohub.config import Settings, get_settings

logger = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """Return the shared pool.

    Raises:
        RuntimeError: If init_database() has not run (or the pool was closed)
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized")
    return _pool


async def init_database(settings: Optional[Settings] = None) -> asyncpg.Pool:
    """Open the credential store's pool, sized and timed from settings.

    Calling it again while a pool is open returns the existing pool.
    """
    global _pool

    if _pool is not None:
        return _pool

    settings = settings or get_settings()
    try:
        _pool = await asyncpg.create_pool(
            settings.postgres_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
    except (asyncpg.PostgresError, OSError, asyncio.TimeoutError) as e:
        logger.error("database_pool_creation_failed", error=str(e))
        raise

    logger.info(
        "database_pool_created",
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    return _pool


async def close_database() -> None:
    global _pool

    if _pool is None:
        return
    pool, _pool = _pool, None
    await pool.close()
    logger.info("database_pool_closed")


async def run_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> List[str]:
    """Apply every ``*.sql`` file in name order, each in its own transaction.

    The users migration only creates missing objects, so reapplying it on
    every startup leaves existing rows alone.

    Returns:
        Names of the files that were applied
    """
    files = sorted(migrations_dir.glob("*.sql")) if migrations_dir.is_dir() else []
    if not files:
        logger.warning("no_migrations_found", path=str(migrations_dir))
        return []

    pool = await get_pool()
    applied = []
    async with pool.acquire() as conn:
        for path in files:
            try:
                async with conn.transaction():
                    await conn.execute(path.read_text())
            except asyncpg.PostgresError as e:
                logger.error("migration_failed", file=path.name, error=str(e))
                raise
            applied.append(path.name)

    logger.info("migrations_applied", files=applied)
    return applied


async def health_check() -> bool:
    """True if the pool can reach the users table."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1 FROM users LIMIT 1")
    except (
        asyncpg.PostgresError,
        asyncpg.InterfaceError,
        OSError,
        asyncio.TimeoutError,
        RuntimeError,
    ) as e:
        logger.error("database_health_check_failed", error=str(e))
        return False
    return True
