from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.utils.settings.database import DatabaseSettings

_database_settings = DatabaseSettings()

async_engine = create_async_engine(
    _database_settings.DATABASE_URL_ASYNC,
    echo=_database_settings.DATABASE_ECHO,
    pool_pre_ping=True,
)
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine, class_=AsyncSession, expire_on_commit=False
)


@asynccontextmanager
async def get_async_db(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Get asynchronous database session.

    Commits on clean exit and rolls back if the block raises.
    """
    factory = session_factory or AsyncSessionLocal
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
