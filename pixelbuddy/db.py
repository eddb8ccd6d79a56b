from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import logging

from pixelbuddy.create_postgres_engine import create_postgres_engine
from pixelbuddy.create_sqlite_engine import create_sqlite_engine
from pixelbuddy.load_secrets import database_url
from pixelbuddy.models.schemas import Base

if database_url.startswith("sqlite"):
    engine = create_sqlite_engine(database_url)
else:
    engine = create_postgres_engine(database_url)

# Centralized session factory to avoid creating it in router modules.
Session = async_sessionmaker(
    autocommit=False,
    class_=AsyncSession,
    autoflush=True,
    expire_on_commit=False,
    bind=engine,
)


async def create_tables() -> None:
    """Create tables if not exists"""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except IntegrityError as e:
        logging.warning(f"Table already exists or other integrity error: {e}")


async def health_check() -> dict:
    """Probe the database with a trivial query

    Returns:
        dict: healthy flag with the database timestamp or the error message
    """
    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT CURRENT_TIMESTAMP"))
            timestamp = result.scalar()
        return {"healthy": True, "timestamp": str(timestamp)}
    except Exception as e:
        logging.error(f"Database health check failed: {e}")
        return {"healthy": False, "error": str(e)}
