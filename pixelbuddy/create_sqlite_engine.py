from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool


def create_sqlite_engine(database_url: str):
    """aiosqlite engine for local runs and tests.

    Connections are not pooled so each session opens on the running event loop.
    """
    return create_async_engine(url=database_url, echo=False, poolclass=NullPool)
