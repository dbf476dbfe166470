import app.db.base  # noqa: F401

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import settings
from app.db.base_class import Base  # noqa: F401


engine_kwargs: dict[str, object] = {
    "echo": settings.env == "local",
    "pool_pre_ping": True,
}
if settings.env == "test":
    engine_kwargs["poolclass"] = NullPool
if settings.database_url.startswith("sqlite"):
    # Writers wait on each other instead of failing with "database is locked".
    engine_kwargs["connect_args"] = {"timeout": 30}

engine = create_async_engine(
    settings.database_url,
    **engine_kwargs,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
