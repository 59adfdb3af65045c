"""Aggregate views over the changelog: stats and filter option lists."""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from changelog.base import ChangelogEntry, SortOrder
from changelog.highlights import UPDATE_CATEGORIES
from changelog.pipeline import sort_entries

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10


def compute_stats(entries: Sequence[ChangelogEntry], now: Optional[datetime] = None) -> dict:
    """Counts, average quality and recent activity for the stats panel.

    Returns:
        {
            "totalEntries": int,
            "entriesThisWeek": int,       # published in the last 7 days
            "entriesThisMonth": int,      # published in the last 30 days
            "averageQualityScore": float,
            "contentTypeBreakdown": {content_type: count},
            "recentActivity": [entry dicts, newest first, max 10],
        }
    """
    now = now or datetime.now(timezone.utc)
    one_week_ago = now - timedelta(days=7)
    one_month_ago = now - timedelta(days=30)

    stats = {
        "totalEntries": len(entries),
        "entriesThisWeek": 0,
        "entriesThisMonth": 0,
        "averageQualityScore": 0.0,
        "contentTypeBreakdown": {},
        "recentActivity": [],
    }
    if not entries:
        return stats

    this_week = [e for e in entries if e.published_at >= one_week_ago]
    stats["entriesThisWeek"] = len(this_week)
    stats["entriesThisMonth"] = sum(1 for e in entries if e.published_at >= one_month_ago)
    stats["averageQualityScore"] = round(
        sum(e.quality_score or 0.0 for e in entries) / len(entries), 3
    )
    stats["contentTypeBreakdown"] = dict(Counter(e.content_type or "unknown" for e in entries))
    stats["recentActivity"] = [
        e.to_dict() for e in sort_entries(this_week, SortOrder.NEWEST)[:RECENT_ACTIVITY_LIMIT]
    ]

    logger.debug(
        "Stats: %d total, %d this week, %d this month",
        stats["totalEntries"], stats["entriesThisWeek"], stats["entriesThisMonth"],
    )
    return stats


def collect_categories(entries: Sequence[ChangelogEntry]) -> dict:
    """Distinct filter options seen in the data, plus the fixed update categories."""
    content_types: list[str] = []
    audiences: list[str] = []
    update_categories = list(UPDATE_CATEGORIES)

    for entry in entries:
        if entry.content_type and entry.content_type not in content_types:
            content_types.append(entry.content_type)
        if entry.target_audience and entry.target_audience not in audiences:
            audiences.append(entry.target_audience)
        if entry.category and entry.category not in update_categories:
            update_categories.append(entry.category)

    return {
        "contentTypes": content_types,
        "audiences": audiences,
        "updateCategories": update_categories,
    }
