"""Tests for review content validation and the status / action vocabulary."""
import pytest

from review_moderation.errors import ValidationError
from review_moderation.models import (
    MAX_REVIEW_TEXT_LENGTH,
    ModerationActionType,
    ReviewStatus,
    User,
    Role,
    validate_moderation_action,
    validate_review,
)


@pytest.mark.parametrize("rating", [1, 3, 5])
def test_valid_ratings_accepted(rating):
    validate_review(rating, "Works as advertised")


@pytest.mark.parametrize("rating", [0, 6, -1, 4.5, "5", None, True])
def test_invalid_ratings_rejected(rating):
    with pytest.raises(ValidationError, match="Rating must be an integer between 1 and 5"):
        validate_review(rating, "Works as advertised")


def test_blank_text_rejected():
    with pytest.raises(ValidationError, match="cannot be empty"):
        validate_review(4, "   \n\t")


def test_missing_text_rejected():
    with pytest.raises(ValidationError, match="required"):
        validate_review(4, None)


def test_text_length_boundary():
    validate_review(4, "x" * MAX_REVIEW_TEXT_LENGTH)
    with pytest.raises(ValidationError, match="5000"):
        validate_review(4, "x" * (MAX_REVIEW_TEXT_LENGTH + 1))


def test_rating_checked_before_text():
    with pytest.raises(ValidationError, match="Rating"):
        validate_review(9, "")


def test_action_resulting_status():
    assert ModerationActionType.APPROVE.resulting_status is ReviewStatus.APPROVED
    assert ModerationActionType.REJECT.resulting_status is ReviewStatus.REJECTED
    assert ModerationActionType.FLAG.resulting_status is ReviewStatus.FLAGGED


def test_validate_moderation_action():
    assert validate_moderation_action("flag") is ModerationActionType.FLAG
    with pytest.raises(ValidationError, match="approve, reject, flag"):
        validate_moderation_action("delete")


def test_user_is_moderator():
    assert User(id=1, username="a", email="a@x", role=Role.MODERATOR).is_moderator
    assert not User(id=2, username="b", email="b@x").is_moderator
