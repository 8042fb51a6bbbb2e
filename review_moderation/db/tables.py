"""SQLAlchemy ORM models for the review moderation database."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Text, DateTime, Enum as SAEnum,
    ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import DeclarativeBase

from review_moderation.models import ModerationActionType, ReviewStatus, Role


def _now():
    return datetime.now(timezone.utc)


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(320), nullable=False, unique=True)
    role = Column(
        SAEnum(Role, values_callable=_values, native_enum=False, length=20),
        nullable=False,
        default=Role.USER,
    )
    created_at = Column(DateTime(timezone=True), default=_now)


class ProductRow(Base):
    """Product catalogue entry — only looked up by id here."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now)


class ReviewRow(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False)  # 1-5 stars
    review_text = Column(Text, nullable=False)
    status = Column(
        SAEnum(ReviewStatus, values_callable=_values, native_enum=False, length=20),
        nullable=False,
        default=ReviewStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
        Index("ix_reviews_product_status", "product_id", "status"),
        Index("ix_reviews_user", "user_id"),
        Index("ix_reviews_status_created", "status", "created_at"),
    )


class ModerationActionRow(Base):
    """Audit trail — one row per moderator decision, never updated."""
    __tablename__ = "moderation_actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False)
    moderator_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    action = Column(
        SAEnum(ModerationActionType, values_callable=_values, native_enum=False, length=20),
        nullable=False,
    )
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    __table_args__ = (
        Index("ix_moderation_review", "review_id"),
        Index("ix_moderation_moderator_created", "moderator_id", "created_at"),
        Index("ix_moderation_created", "created_at"),
    )
