"""The blocking-session adapter must behave exactly like the async one."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from review_moderation.db.repository import SyncSQLStore
from review_moderation.db.tables import Base
from review_moderation.errors import ForbiddenError, StorageError
from review_moderation.models import ModerationActionType, ReviewStatus
from review_moderation.services import ModerationService, ReviewService
from tests.conftest import ALICE, BOB, LAMP, MAX, MIA, FakeClock, seed_rows


@pytest.fixture
def sync_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all(seed_rows())
        session.commit()
    yield engine
    engine.dispose()


@pytest.fixture
def sync_store(sync_engine):
    factory = sessionmaker(sync_engine, class_=Session, expire_on_commit=False)
    with factory() as session:
        yield SyncSQLStore(session, clock=FakeClock())


@pytest.mark.asyncio
async def test_full_lifecycle(sync_store):
    reviews = ReviewService(sync_store)
    moderation = ModerationService(sync_store)
    clock = sync_store._clock

    review = await reviews.create_review(ALICE, LAMP, 5, "Lovely light")
    assert [r.id for r in await moderation.get_pending_queue(MIA)] == [review.id]

    clock.advance(minutes=45)
    approved = await moderation.approve_review(review.id, MIA)
    assert approved.status is ReviewStatus.APPROVED
    assert [r.id for r in await reviews.get_product_reviews(LAMP)] == [review.id]

    stats = await moderation.get_statistics(MAX)
    assert stats.approval_rate == 100.0
    assert stats.average_processing_time_minutes == 45.0

    edited = await reviews.update_review(review.id, ALICE, 4, "Lovely light, loud switch")
    assert edited.status is ReviewStatus.PENDING
    assert await reviews.get_product_reviews(LAMP) == []

    history = await moderation.get_moderation_history(MIA)
    assert [e.action for e in history] == [ModerationActionType.APPROVE]

    assert await reviews.delete_review(review.id, ALICE) is True
    assert await sync_store.list_actions_by_moderator(MIA) == []


@pytest.mark.asyncio
async def test_guards_apply(sync_store):
    reviews = ReviewService(sync_store)
    moderation = ModerationService(sync_store)
    review = await reviews.create_review(MIA, LAMP, 3, "My own lamp review")

    with pytest.raises(ForbiddenError):
        await moderation.approve_review(review.id, MIA)
    with pytest.raises(ForbiddenError):
        await moderation.get_pending_queue(BOB)
    assert await sync_store.list_actions_by_review(review.id) == []


@pytest.mark.asyncio
async def test_backend_failure_raises_storage_error():
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    with Session(engine) as session:
        store = SyncSQLStore(session)
        with pytest.raises(StorageError) as info:
            await store.get_user_by_id(ALICE)
        assert info.value.operation == "get user"
    engine.dispose()
