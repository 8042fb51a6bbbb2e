"""FastAPI dependencies — the one place that picks a Store adapter."""
from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends

from config.settings import settings
from review_moderation.db.engine import async_session, get_sync_sessionmaker
from review_moderation.db.repository import AsyncSQLStore, SyncSQLStore
from review_moderation.db.store import Store
from review_moderation.services import ModerationService, ReviewService


async def get_store() -> AsyncIterator[Store]:
    """Yield a request-scoped Store bound to a fresh session."""
    if settings.STORE_BACKEND == "sync":
        with get_sync_sessionmaker()() as session:
            yield SyncSQLStore(session)
    else:
        async with async_session() as session:
            yield AsyncSQLStore(session)


def get_review_service(store: Store = Depends(get_store)) -> ReviewService:
    return ReviewService(store)


def get_moderation_service(store: Store = Depends(get_store)) -> ModerationService:
    return ModerationService(store)
