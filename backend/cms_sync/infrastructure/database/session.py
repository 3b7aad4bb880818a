"""Engine and session wiring for the content entry store."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cms_sync.config import get_settings

_ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "postgresql": "postgresql+asyncpg",
}


def async_database_url(url: str) -> str:
    """Swap a plain ``scheme://`` URL for its async driver; leave explicit drivers alone."""
    scheme, separator, rest = url.partition("://")
    if not separator or "+" in scheme:
        return url
    return f"{_ASYNC_DRIVERS.get(scheme, scheme)}://{rest}"


def build_engine(url: str) -> AsyncEngine:
    """Async engine for ``url``.

    SQL statement logging goes through the ``sqlalchemy.engine`` logger
    (see ``log_level_sql``), so ``echo`` stays off.  An in-memory SQLite
    database is pinned to one connection so every session sees the same
    tables.
    """
    url = async_database_url(url)
    if url.endswith(":memory:"):
        return create_async_engine(url, poolclass=StaticPool)
    return create_async_engine(url)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Entries are serialized after commit; keep their attributes loaded.
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(get_settings().database_url)
async_session_factory = build_session_factory(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: commits when the endpoint returns, rolls back if it raises."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        await session.commit()
