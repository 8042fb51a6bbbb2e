"""SQLAlchemy engines + session factories.

The async engine serves the default ``AsyncSQLStore``. The sync engine is
built on first use for deployments that run ``STORE_BACKEND=sync`` (blocking
drivers such as pysqlite or psycopg2). Supports both SQLite (dev) and
PostgreSQL (prod) with appropriate pool settings.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings


def async_url(url: str) -> str:
    """Convert postgresql:// to postgresql+asyncpg:// for async support."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def sync_url(url: str) -> str:
    """Strip async drivers so a blocking engine can use the same database."""
    if "aiosqlite" in url:
        return url.replace("sqlite+aiosqlite", "sqlite", 1)
    if "asyncpg" in url:
        return url.replace("postgresql+asyncpg", "postgresql", 1)
    return url


def _engine_kwargs(url: str) -> dict:
    kwargs: dict = {"echo": False}
    if not url.startswith("sqlite"):
        # Production PostgreSQL pool settings
        kwargs.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_timeout": 30,
            "pool_recycle": 1800,  # Recycle connections every 30 min
            "pool_pre_ping": True,  # Verify connections before use
        })
    return kwargs


_db_url = async_url(settings.DATABASE_URL)

engine = create_async_engine(_db_url, **_engine_kwargs(_db_url))

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

_sync_engine: Optional[Engine] = None
_sync_session: Optional[sessionmaker] = None


def get_sync_engine() -> Engine:
    """Build (once) the blocking engine and its session factory."""
    global _sync_engine, _sync_session
    if _sync_engine is None:
        url = sync_url(settings.DATABASE_URL)
        _sync_engine = create_engine(url, **_engine_kwargs(url))
        _sync_session = sessionmaker(_sync_engine, class_=Session, expire_on_commit=False)
    return _sync_engine


def get_sync_sessionmaker() -> sessionmaker:
    get_sync_engine()
    return _sync_session


def dispose_sync_engine() -> None:
    global _sync_engine, _sync_session
    if _sync_engine is not None:
        _sync_engine.dispose()
    _sync_engine = None
    _sync_session = None
