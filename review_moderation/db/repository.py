"""Review repository — SQLAlchemy implementation of the Store + Pydantic conversion.

``SQLStore`` expresses every Store operation once. The two adapters below only
decide how a statement reaches the database:

- ``AsyncSQLStore`` awaits an ``AsyncSession`` (aiosqlite, asyncpg)
- ``SyncSQLStore`` calls a blocking ``Session`` (pysqlite, psycopg2)

Each mutating operation is one transaction: commit on success, rollback and
``StorageError`` on failure.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import select, func, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from review_moderation.db.store import ActionStatistics, Store, as_utc, utcnow
from review_moderation.db.tables import ModerationActionRow, ProductRow, ReviewRow, UserRow
from review_moderation.errors import StorageError
from review_moderation.models import (
    DECISION_ACTIONS,
    ModerationAction,
    ModerationActionType,
    Product,
    Review,
    ReviewStatus,
    User,
)

logger = logging.getLogger(__name__)


def _row_to_review(row: ReviewRow) -> Review:
    return Review(
        id=row.id,
        user_id=row.user_id,
        product_id=row.product_id,
        rating=row.rating,
        review_text=row.review_text,
        status=row.status,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _row_to_action(row: ModerationActionRow) -> ModerationAction:
    return ModerationAction(
        id=row.id,
        review_id=row.review_id,
        moderator_id=row.moderator_id,
        action=row.action,
        notes=row.notes or "",
        created_at=as_utc(row.created_at),
    )


def _row_to_user(row: UserRow) -> User:
    return User(id=row.id, username=row.username, email=row.email, role=row.role)


def _row_to_product(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        description=row.description,
        category=row.category,
    )


def _within(stmt, column, start: Optional[datetime], end: Optional[datetime]):
    """Restrict ``stmt`` to ``start <= column <= end``; either side may be open."""
    if start is not None:
        stmt = stmt.where(column >= as_utc(start))
    if end is not None:
        stmt = stmt.where(column <= as_utc(end))
    return stmt


def _minutes_between(earlier: datetime, later: datetime) -> float:
    return (as_utc(later) - as_utc(earlier)).total_seconds() / 60


class SQLStore(Store):
    """Store operations over SQLAlchemy; subclasses bind a session flavour."""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock

    # ── Session primitives (adapter-specific) ───────────────────────────

    async def _execute(self, stmt):
        raise NotImplementedError

    async def _get(self, model, pk):
        raise NotImplementedError

    async def _add(self, row) -> None:
        raise NotImplementedError

    async def _delete(self, row) -> None:
        raise NotImplementedError

    async def _flush(self) -> None:
        raise NotImplementedError

    async def _commit(self) -> None:
        raise NotImplementedError

    async def _rollback(self) -> None:
        raise NotImplementedError

    # ── Unit of work ────────────────────────────────────────────────────

    @asynccontextmanager
    async def _transaction(self, operation: str):
        try:
            yield
            await self._commit()
        except SQLAlchemyError as exc:
            await self._rollback()
            logger.exception("Store operation '%s' failed", operation)
            raise StorageError(str(exc), operation=operation) from exc
        except Exception:
            await self._rollback()
            raise

    @asynccontextmanager
    async def _reading(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            await self._rollback()
            logger.exception("Store operation '%s' failed", operation)
            raise StorageError(str(exc), operation=operation) from exc

    async def _scalars(self, stmt) -> list:
        result = await self._execute(stmt)
        return list(result.scalars().all())

    # ── Reviews ─────────────────────────────────────────────────────────

    async def insert_review(self, user_id: int, product_id: int, rating: int, review_text: str) -> Review:
        now = self._clock()
        async with self._transaction("insert review"):
            row = ReviewRow(
                user_id=user_id,
                product_id=product_id,
                rating=rating,
                review_text=review_text,
                status=ReviewStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            await self._add(row)
            await self._flush()
            review = _row_to_review(row)
        return review

    async def get_review_by_id(self, review_id: int) -> Optional[Review]:
        async with self._reading("get review"):
            row = await self._get(ReviewRow, review_id)
            return _row_to_review(row) if row else None

    async def list_reviews_by_product(
        self, product_id: int, status: Optional[ReviewStatus] = None
    ) -> list[Review]:
        stmt = select(ReviewRow).where(ReviewRow.product_id == product_id)
        if status is not None:
            stmt = stmt.where(ReviewRow.status == status)
        stmt = stmt.order_by(ReviewRow.created_at.desc(), ReviewRow.id.desc())
        async with self._reading("list reviews by product"):
            return [_row_to_review(r) for r in await self._scalars(stmt)]

    async def list_reviews_by_user(self, user_id: int) -> list[Review]:
        stmt = (
            select(ReviewRow)
            .where(ReviewRow.user_id == user_id)
            .order_by(ReviewRow.created_at.desc(), ReviewRow.id.desc())
        )
        async with self._reading("list reviews by user"):
            return [_row_to_review(r) for r in await self._scalars(stmt)]

    async def list_reviews_by_status(self, status: ReviewStatus) -> list[Review]:
        stmt = select(ReviewRow).where(ReviewRow.status == status)
        if status is ReviewStatus.PENDING:
            # FIFO queue — earliest submissions are moderated first
            stmt = stmt.order_by(ReviewRow.created_at.asc(), ReviewRow.id.asc())
        else:
            stmt = stmt.order_by(ReviewRow.created_at.desc(), ReviewRow.id.desc())
        async with self._reading("list reviews by status"):
            return [_row_to_review(r) for r in await self._scalars(stmt)]

    async def update_review_content(
        self,
        review_id: int,
        rating: int,
        review_text: str,
        status: Optional[ReviewStatus] = None,
    ) -> Optional[Review]:
        async with self._transaction("update review content"):
            row = await self._get(ReviewRow, review_id)
            if row is None:
                return None
            row.rating = rating
            row.review_text = review_text
            if status is not None:
                row.status = status
            row.updated_at = self._clock()
            await self._flush()
            review = _row_to_review(row)
        return review

    async def update_review_status(self, review_id: int, status: ReviewStatus) -> Optional[Review]:
        async with self._transaction("update review status"):
            row = await self._get(ReviewRow, review_id)
            if row is None:
                return None
            row.status = status
            row.updated_at = self._clock()
            await self._flush()
            review = _row_to_review(row)
        return review

    async def delete_review(self, review_id: int) -> bool:
        async with self._transaction("delete review"):
            row = await self._get(ReviewRow, review_id)
            if row is None:
                return False
            # Cascade explicitly; SQLite does not enforce ON DELETE unless asked
            await self._execute(
                delete(ModerationActionRow).where(ModerationActionRow.review_id == review_id)
            )
            await self._delete(row)
            await self._flush()
        return True

    async def average_approved_rating(self, product_id: int) -> float:
        stmt = select(func.avg(ReviewRow.rating)).where(
            ReviewRow.product_id == product_id,
            ReviewRow.status == ReviewStatus.APPROVED,
        )
        async with self._reading("average approved rating"):
            avg = (await self._execute(stmt)).scalar()
        return float(avg) if avg is not None else 0.0

    async def count_reviews_by_status(self, product_id: int, status: ReviewStatus) -> int:
        stmt = select(func.count(ReviewRow.id)).where(
            ReviewRow.product_id == product_id,
            ReviewRow.status == status,
        )
        async with self._reading("count reviews by status"):
            return (await self._execute(stmt)).scalar() or 0

    # ── Moderation actions ──────────────────────────────────────────────

    def _new_action_row(self, review_id, moderator_id, action, notes) -> ModerationActionRow:
        return ModerationActionRow(
            review_id=review_id,
            moderator_id=moderator_id,
            action=ModerationActionType(action),
            notes=notes or "",
            created_at=self._clock(),
        )

    async def insert_moderation_action(
        self,
        review_id: int,
        moderator_id: int,
        action: ModerationActionType,
        notes: str = "",
    ) -> ModerationAction:
        async with self._transaction("insert moderation action"):
            row = self._new_action_row(review_id, moderator_id, action, notes)
            await self._add(row)
            await self._flush()
            recorded = _row_to_action(row)
        return recorded

    async def apply_moderation_action(
        self,
        review_id: int,
        moderator_id: int,
        action: ModerationActionType,
        notes: str = "",
    ) -> Optional[Review]:
        action = ModerationActionType(action)
        async with self._transaction(f"{action.value} review"):
            review_row = await self._get(ReviewRow, review_id)
            if review_row is None:
                return None
            # Audit row first: if the status write fails, neither survives the rollback
            action_row = self._new_action_row(review_id, moderator_id, action, notes)
            await self._add(action_row)
            await self._flush()
            review_row.status = action.resulting_status
            review_row.updated_at = action_row.created_at
            await self._flush()
            review = _row_to_review(review_row)
        return review

    async def list_actions_by_review(self, review_id: int) -> list[ModerationAction]:
        stmt = (
            select(ModerationActionRow)
            .where(ModerationActionRow.review_id == review_id)
            .order_by(ModerationActionRow.created_at.desc(), ModerationActionRow.id.desc())
        )
        async with self._reading("list actions by review"):
            return [_row_to_action(r) for r in await self._scalars(stmt)]

    async def list_actions_by_moderator(
        self,
        moderator_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[ModerationAction]:
        stmt = select(ModerationActionRow).where(ModerationActionRow.moderator_id == moderator_id)
        stmt = _within(stmt, ModerationActionRow.created_at, start_date, end_date)
        stmt = stmt.order_by(ModerationActionRow.created_at.desc(), ModerationActionRow.id.desc())
        async with self._reading("list actions by moderator"):
            return [_row_to_action(r) for r in await self._scalars(stmt)]

    async def action_statistics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> ActionStatistics:
        # One SELECT feeds every aggregate so they describe the same snapshot
        stmt = select(
            ModerationActionRow.action,
            ModerationActionRow.created_at,
            ReviewRow.created_at.label("review_created_at"),
        ).outerjoin(ReviewRow, ReviewRow.id == ModerationActionRow.review_id)
        stmt = _within(stmt, ModerationActionRow.created_at, start_date, end_date)

        async with self._reading("action statistics"):
            rows = (await self._execute(stmt)).all()

        stats = ActionStatistics(
            counts={a: 0 for a in ModerationActionType},
            start_date=as_utc(start_date),
            end_date=as_utc(end_date),
        )
        processing: list[float] = []
        for action, acted_at, review_created_at in rows:
            action = ModerationActionType(action)
            stats.counts[action] += 1
            if action not in DECISION_ACTIONS:
                continue
            stats.decided_count += 1
            if action is ModerationActionType.APPROVE:
                stats.approved_count += 1
            if review_created_at is not None:
                processing.append(_minutes_between(review_created_at, acted_at))

        if processing:
            stats.average_processing_minutes = sum(processing) / len(processing)
        return stats

    # ── Reference lookups ───────────────────────────────────────────────

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        async with self._reading("get user"):
            row = await self._get(UserRow, user_id)
            return _row_to_user(row) if row else None

    async def get_product_by_id(self, product_id: int) -> Optional[Product]:
        async with self._reading("get product"):
            row = await self._get(ProductRow, product_id)
            return _row_to_product(row) if row else None


class AsyncSQLStore(SQLStore):
    """Store over an ``AsyncSession`` — every call is awaited."""

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        super().__init__(clock)
        self.session = session

    async def _execute(self, stmt):
        return await self.session.execute(stmt)

    async def _get(self, model, pk):
        return await self.session.get(model, pk)

    async def _add(self, row) -> None:
        self.session.add(row)

    async def _delete(self, row) -> None:
        await self.session.delete(row)

    async def _flush(self) -> None:
        await self.session.flush()

    async def _commit(self) -> None:
        await self.session.commit()

    async def _rollback(self) -> None:
        await self.session.rollback()


class SyncSQLStore(SQLStore):
    """Store over a blocking ``Session``.

    Calls run inline on the event loop thread; each one is a single short
    statement, and the session is never shared across threads.
    """

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow):
        super().__init__(clock)
        self.session = session

    async def _execute(self, stmt):
        return self.session.execute(stmt)

    async def _get(self, model, pk):
        return self.session.get(model, pk)

    async def _add(self, row) -> None:
        self.session.add(row)

    async def _delete(self, row) -> None:
        self.session.delete(row)

    async def _flush(self) -> None:
        self.session.flush()

    async def _commit(self) -> None:
        self.session.commit()

    async def _rollback(self) -> None:
        self.session.rollback()
