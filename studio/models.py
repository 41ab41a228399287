"""Core SQLAlchemy models (2.x style) for the studio site.

One table per entity kind. Every table carries the public string ``id`` plus
an autoincrement ``seq`` key, so insertion order is recoverable regardless of
the backend.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class RecordMixin:
    """Insertion sequence, public id and creation timestamp shared by every entity."""

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False, default=new_id)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class Contact(RecordMixin, Base):
    """Contact form submissions."""
    __tablename__ = "contacts"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    company: Mapped[str | None] = mapped_column(String(255))
    service: Mapped[str | None] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_contacts_submitted_at", "submitted_at"),
    )


class NewsletterSubscriber(RecordMixin, Base):
    """Newsletter subscriptions; one row per email."""
    __tablename__ = "newsletter_subscribers"

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    subscribed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_newsletter_subscribers_subscribed_at", "subscribed_at"),
    )


class Project(RecordMixin, Base):
    """Portfolio projects."""
    __tablename__ = "projects"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image_ref: Mapped[str | None] = mapped_column(String(255))
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_projects_date", "date"),
    )


class Post(RecordMixin, Base):
    """Blog posts."""
    __tablename__ = "posts"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_ref: Mapped[str | None] = mapped_column(String(255))
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_posts_published_at", "published_at"),
    )


class TeamMember(RecordMixin, Base):
    """Team profiles."""
    __tablename__ = "team_members"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(255), nullable=False)
    image_ref: Mapped[str | None] = mapped_column(String(255))
    bio: Mapped[str] = mapped_column(Text, nullable=False)
    social: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)  # instagram/linkedin/twitter
