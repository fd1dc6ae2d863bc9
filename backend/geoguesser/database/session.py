from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ..config import get_settings


class Base(DeclarativeBase):
    pass


settings = get_settings()

engine: Optional[AsyncEngine] = (
    create_async_engine(settings.DATABASE_URL) if settings.DATABASE_URL else None
)
SessionLocal: Optional[async_sessionmaker[AsyncSession]] = (
    async_sessionmaker(engine, expire_on_commit=False) if engine is not None else None
)


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create all tables."""
    bind = bind or engine
    if bind is None:
        return
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency yielding a database session."""
    if SessionLocal is None:
        raise RuntimeError("DATABASE_URL is not configured")
    async with SessionLocal() as session:
        yield session
