"""Tests for the role and ownership guards."""
import pytest

from review_moderation.errors import ForbiddenError, NotFoundError
from review_moderation.services.authorization import (
    forbid_self_moderation,
    require_moderator,
    require_owner,
)
from tests.conftest import ALICE, BOB, MIA, MISSING, submit


@pytest.mark.asyncio
async def test_moderator_passes(store):
    user = await require_moderator(store, MIA)
    assert user.username == "mia"


@pytest.mark.asyncio
async def test_regular_user_forbidden(store):
    with pytest.raises(ForbiddenError, match="moderator privileges required"):
        await require_moderator(store, ALICE)


@pytest.mark.asyncio
async def test_unknown_user_not_found(store):
    with pytest.raises(NotFoundError, match=f"User {MISSING} not found"):
        await require_moderator(store, MISSING)


@pytest.mark.asyncio
async def test_owner_and_self_moderation(review_service):
    review = await submit(review_service, user_id=ALICE)

    require_owner(review, ALICE)
    with pytest.raises(ForbiddenError, match="your own reviews"):
        require_owner(review, BOB)

    forbid_self_moderation(review, MIA)
    with pytest.raises(ForbiddenError, match="cannot moderate their own"):
        forbid_self_moderation(review, ALICE)


@pytest.mark.asyncio
async def test_is_moderator(store):
    assert await store.is_moderator(MIA)
    assert not await store.is_moderator(ALICE)
    assert not await store.is_moderator(MISSING)
