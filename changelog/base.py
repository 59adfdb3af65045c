from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

DEFAULT_CATEGORY = "uncategorized"
DEFAULT_IMPORTANCE = 0.7


class ContentType(str, Enum):
    PRODUCT_ANNOUNCEMENT = "product_announcement"
    FEATURE_RELEASE = "feature_release"
    BUG_FIX = "bug_fix"
    SECURITY_UPDATE = "security_update"
    PERFORMANCE_IMPROVEMENT = "performance_improvement"
    INTEGRATION_UPDATE = "integration_update"
    CHANGELOG_ENTRY = "changelog_entry"
    CUSTOMER_COMMUNICATION = "customer_communication"
    SALES_ENABLEMENT = "sales_enablement"
    SOCIAL_MEDIA_POST = "social_media_post"


class Audience(str, Enum):
    CUSTOMERS = "customers"
    INTERNAL_TEAM = "internal_team"
    SALES_TEAM = "sales_team"
    DEVELOPERS = "developers"
    EXECUTIVES = "executives"


class TimeRange(str, Enum):
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    ALL = "all"

    @property
    def days(self) -> Optional[int]:
        return {"7d": 7, "30d": 30, "90d": 90}.get(self.value)


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"


class GroupBy(str, Enum):
    DATE = "date"
    CATEGORY = "category"
    IMPORTANCE = "importance"


class SearchField(str, Enum):
    TITLE = "title"
    BODY = "body"
    SUMMARY = "summary"


class Visibility(str, Enum):
    ALL = "all"
    PUBLIC = "public"
    PRIVATE = "private"


class StatusFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    APPROVED = "approved"
    PUBLISHED = "published"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class ChangelogEntry:
    id: str
    title: str
    body: str
    content_type: str
    target_audience: str
    status: str
    quality_score: float
    published_at: datetime
    summary: Optional[str] = None
    bullet_points: tuple[str, ...] = field(default_factory=tuple)
    tags: tuple[str, ...] = field(default_factory=tuple)
    category: Optional[str] = None
    importance_score: Optional[float] = None
    breaking_changes: bool = False
    is_public: bool = False
    needs_approval: bool = False
    version: Optional[str] = None
    jira_story_key: Optional[str] = None
    view_count: int = 0
    upvotes: int = 0
    feedback_count: int = 0

    @property
    def effective_category(self) -> str:
        return self.category or DEFAULT_CATEGORY

    @property
    def effective_importance(self) -> float:
        if self.importance_score is None:
            return DEFAULT_IMPORTANCE
        return self.importance_score

    @classmethod
    def from_record(cls, record: Any) -> "ChangelogEntry":
        """Build an immutable entry from a ChangelogEntryRecord row."""
        return cls(
            id=record.id,
            title=record.title or "",
            body=record.body or "",
            content_type=record.content_type or "changelog_entry",
            target_audience=record.target_audience or "customers",
            status=record.status or "draft",
            quality_score=record.quality_score if record.quality_score is not None else 0.85,
            published_at=as_utc(record.published_at),
            summary=record.summary,
            bullet_points=tuple(record.bullet_points or ()),
            tags=tuple(record.tags or ()),
            category=record.category,
            importance_score=record.importance_score,
            breaking_changes=bool(record.breaking_changes),
            is_public=bool(record.is_public),
            needs_approval=bool(record.needs_approval),
            version=record.version,
            jira_story_key=record.jira_story_key,
            view_count=record.view_count or 0,
            upvotes=record.upvotes or 0,
            feedback_count=record.feedback_count or 0,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "content_type": self.content_type,
            "target_audience": self.target_audience,
            "status": self.status,
            "quality_score": self.quality_score,
            "published_at": _isoformat(self.published_at),
            "summary": self.summary,
            "bullet_points": list(self.bullet_points),
            "tags": list(self.tags),
            "category": self.category,
            "importance_score": self.importance_score,
            "breaking_changes": self.breaking_changes,
            "is_public": self.is_public,
            "version": self.version,
            "jira_story_key": self.jira_story_key,
            "view_count": self.view_count,
            "upvotes": self.upvotes,
            "feedback_count": self.feedback_count,
        }
