"""Async engine and session plumbing for the identity and recovery schemas."""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from authdir.config import get_settings

SCHEMAS = ("identity", "recovery")

# SQLite has no schemas; every table lands in the main database
SQLITE_SCHEMA_MAP = {schema: None for schema in SCHEMAS}


class Base(DeclarativeBase):
    pass


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an engine for ``url``.

    PostgreSQL gets a bounded, pre-pinged pool. SQLite (local runs and tests)
    gets the schema names translated away instead.
    """
    if make_url(url).get_backend_name() == "sqlite":
        return create_async_engine(
            url,
            echo=echo,
            execution_options={"schema_translate_map": SQLITE_SCHEMA_MAP},
        )
    return create_async_engine(
        url,
        echo=echo,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Entities are mapped out of the session right away; nothing needs a refresh after commit
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database_url, echo=settings.debug)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """One unit of work: committed when the block exits cleanly, rolled back otherwise."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
