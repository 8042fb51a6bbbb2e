"""Authorization guard — role and ownership checks shared by both services."""
from __future__ import annotations

from review_moderation.db.store import Store
from review_moderation.errors import ForbiddenError, NotFoundError
from review_moderation.models import Review, Role, User


async def require_moderator(store: Store, user_id: int) -> User:
    """Return the user if they hold the moderator role.

    Raises NotFoundError for an unknown user, ForbiddenError for a plain user.
    """
    user = await store.get_user_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")

    if user.role is not Role.MODERATOR:
        raise ForbiddenError("Access denied: moderator privileges required")
    return user


def require_owner(review: Review, actor_id: int) -> None:
    if review.user_id != actor_id:
        raise ForbiddenError("You can only modify your own reviews")


def forbid_self_moderation(review: Review, moderator_id: int) -> None:
    if review.user_id == moderator_id:
        raise ForbiddenError("Moderators cannot moderate their own reviews")
