"""SQLAlchemy models — changelog entries plus public engagement tracking."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    JSON,
)
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ChangelogEntryRecord(Base):
    """Product updates shown on the admin and public changelog."""

    __tablename__ = "changelog_entries"

    id = Column(String(64), primary_key=True)
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=False, default="")
    content_type = Column(String(64), nullable=False, default="changelog_entry", index=True)
    target_audience = Column(String(64), nullable=False, default="customers", index=True)
    status = Column(String(32), default="draft", index=True)  # draft / approved / published
    approval_status = Column(String(32), default="pending")  # pending / approved / rejected
    needs_approval = Column(Boolean, default=False)
    quality_score = Column(Float, default=0.85)
    summary = Column(Text, nullable=True)
    bullet_points = Column(JSON, nullable=True)  # list of highlight strings
    tags = Column(JSON, nullable=True)
    category = Column(String(64), nullable=True, index=True)  # feature_update / bug_fix / ...
    importance_score = Column(Float, nullable=True)
    breaking_changes = Column(Boolean, default=False)
    migration_notes = Column(Text, nullable=True)
    is_public = Column(Boolean, default=False, index=True)
    version = Column(String(32), nullable=True)
    jira_story_key = Column(String(32), nullable=True)
    external_link = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    view_count = Column(Integer, default=0)
    upvotes = Column(Integer, default=0)
    feedback_count = Column(Integer, default=0)
    approval_metadata = Column(JSON, nullable=True)  # who/when/how an entry was approved
    published_at = Column(DateTime, default=_utcnow, nullable=False, index=True)
    release_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)


class ChangelogFeedback(Base):
    """Free-text feedback left on a public changelog entry."""

    __tablename__ = "changelog_feedback"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(String(64), nullable=False, index=True)
    feedback = Column(Text, nullable=False)
    email = Column(String(256), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class ChangelogView(Base):
    """One row per tracked view (admin mark_viewed or public track_view)."""

    __tablename__ = "changelog_views"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(128), nullable=True)
    user_agent = Column(Text, nullable=True)
    source = Column(String(16), default="public")  # admin / public
    viewed_at = Column(DateTime, default=_utcnow, nullable=False)
