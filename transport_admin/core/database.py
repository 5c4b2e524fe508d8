# transport_admin/core/database.py
from typing import AsyncIterator, Any, Dict
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from transport_admin.core.config import settings

database_url = settings.DATABASE_URL


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {"echo": False, "future": True}
    return {
        "pool_size": 20,
        "max_overflow": 30,
        "pool_timeout": 60,
        "pool_recycle": 3600,  # Recycle connections every hour
        "echo": False,
        "future": True,
        "pool_pre_ping": True,
    }


engine = create_async_engine(database_url, **_engine_options(database_url))

async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with async_session_maker() as session:
        yield session
