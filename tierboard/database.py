"""
tierboard/database.py
Async engine, session factory and startup helpers
"""
import logging

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tierboard.config import settings
from tierboard.orm.base import Base
import tierboard.orm  # registers all models on Base.metadata

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL


def build_engine(url: str, echo: bool = False):
    """
    Create an async engine with pool settings suited to the backend.

    In-memory SQLite needs a single shared connection, otherwise every
    checkout sees an empty database.
    """
    if "sqlite" in url.lower():
        if ":memory:" in url:
            return create_async_engine(
                url,
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        return create_async_engine(
            url,
            echo=echo,
            pool_pre_ping=True,
            connect_args={"timeout": 30.0},
        )
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=3600,
    )


def build_sessionmaker(bind) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(DATABASE_URL, echo=settings.DATABASE_ECHO)
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db():
    """Dependency for getting async database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(bind=None):
    """Create tables that don't exist yet. Idempotent."""
    bind = bind or engine
    logger.info("Initializing database...")
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def drop_db(bind=None):
    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("All tables dropped")


async def check_db(session: AsyncSession) -> bool:
    """Return True when the database answers a trivial query."""
    try:
        await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


async def close_db():
    """Close database connection"""
    await engine.dispose()
    logger.info("Database connection closed")


async def seed_auth_config(db: AsyncSession):
    """
    Store hashed owner/general passwords from settings if absent.

    Existing rows are never overwritten, so a password rotated through the
    database survives restarts.
    """
    from tierboard.orm.admin import AuthConfig
    from tierboard.services.admin_service import (
        GENERAL_PASSWORD_KEY, OWNER_PASSWORD_KEY, SESSION_EPOCH_KEY, hash_secret,
    )

    seeds = {
        OWNER_PASSWORD_KEY: settings.OWNER_PASSWORD,
        GENERAL_PASSWORD_KEY: settings.GENERAL_PASSWORD,
    }
    for key, plain in seeds.items():
        existing = await db.get(AuthConfig, key)
        if existing:
            logger.info(f"Auth config '{key}' already exists")
            continue
        if not plain:
            logger.warning(f"Auth config '{key}' not set; configure it in the environment")
            continue
        db.add(AuthConfig(config_key=key, config_value=hash_secret(plain)))
        logger.info(f"Auth config '{key}' initialized")

    if await db.get(AuthConfig, SESSION_EPOCH_KEY) is None:
        db.add(AuthConfig(config_key=SESSION_EPOCH_KEY, config_value="0"))

    await db.commit()


async def count_rows(db: AsyncSession, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return int(result.scalar() or 0)
