from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator, TypeVar

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from playlist_backend.config import settings
from playlist_backend.db_urls import ensure_sqlite_parent_dir, normalize_database_url_for_async

T = TypeVar("T")


def _create_async_engine(database_url: str) -> AsyncEngine:
    # Always run on an async driver so deployments do not pick a sync default by accident.
    ensure_sqlite_parent_dir(database_url)
    url = normalize_database_url_for_async(database_url)
    # hide_parameters keeps bound values (the PIN column) out of error messages and logs.
    return create_async_engine(url, echo=False, pool_pre_ping=True, hide_parameters=True)


@lru_cache(maxsize=4)
def get_engine() -> AsyncEngine:
    # Tests override settings.database_url and call reset_engine_cache() to rebuild.
    return _create_async_engine(settings.database_url)


def reset_engine_cache() -> None:
    get_engine.cache_clear()


def dispose_engine_cache() -> None:
    # Release pooled connections so aiosqlite worker threads do not keep the process alive.
    if get_engine.cache_info().currsize:
        get_engine().sync_engine.dispose()
    reset_engine_cache()


async def init_db() -> None:
    # Local/test fallback only; deployments run Alembic migrations.
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    session_maker = async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


async def get_session() -> AsyncIterator[AsyncSession]:
    session_maker = async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


async def run_in_transaction(session: AsyncSession, apply: Callable[[], Awaitable[T]]) -> T:
    """Run `apply` in one transaction: commit on success, roll back on any error."""

    try:
        if session.in_transaction():
            out = await apply()
            await session.commit()
            return out
        async with session.begin():
            return await apply()
    except Exception:
        try:
            await session.rollback()
        except Exception:
            pass
        raise
