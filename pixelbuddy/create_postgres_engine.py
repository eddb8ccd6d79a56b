from sqlalchemy.ext.asyncio import create_async_engine


def create_postgres_engine(database_url: str):
    """Pooled asyncpg engine for the production database."""
    return create_async_engine(
        database_url,
        pool_size=10,
        max_overflow=10,
        pool_pre_ping=True,
        pool_timeout=10,
    )
