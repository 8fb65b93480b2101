import os
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from .config import get_settings

settings = get_settings()

_db_url = settings.database_url

if os.environ.get("DATABASE_URL"):
    _db_url = os.environ["DATABASE_URL"]

try:
    async_engine = create_async_engine(
        _db_url,
        echo=settings.debug,
    )

    AsyncSessionLocal = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
except Exception:
    # Driver missing or malformed URL - run with in-memory collaborators only
    async_engine = None
    AsyncSessionLocal = None

Base = declarative_base()


async def init_db():
    """Initialize database tables."""
    if async_engine is None:
        return
    from . import models  # noqa: F401 - registers the tables on Base
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
