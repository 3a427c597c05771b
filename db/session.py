from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from core.config import settings
from models.base import Base

engine_options = {"echo": False, "future": True}
if settings.DATABASE_URL.startswith("postgresql"):
    # PostgreSQL driver for async operations is asyncpg
    engine_options.update(
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=5,
        max_overflow=5,
    )

engine = create_async_engine(settings.DATABASE_URL, **engine_options)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

async def init_db():
    """Create missing tables."""
    import models.stats  # noqa: F401  registers GameStat on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
