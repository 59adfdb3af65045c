"""Changelog entry pipeline — filter, sort, group, and search.

Every stage is a pure function over a sequence of ChangelogEntry values.
Two paths exist and never compose:

    filter -> sort -> group      (browsing)
    search -> group              (free-text query active)

Search always runs against the raw entry list, so a query ignores whatever
filters are currently selected.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from changelog.base import (
    ChangelogEntry,
    GroupBy,
    SearchField,
    SortOrder,
    StatusFilter,
    TimeRange,
    Visibility,
)

HIGH_IMPACT_THRESHOLD = 0.8
MEDIUM_IMPACT_THRESHOLD = 0.6

DATE_GROUP_PRIORITY = ("Today", "Yesterday", "This Week", "This Month")
IMPORTANCE_GROUP_PRIORITY = ("High Impact", "Medium Impact", "Low Impact")

ALL_SEARCH_FIELDS = frozenset(SearchField)


class ChangelogQuery(BaseModel):
    """Everything the dashboard can ask of the entry list in one request."""

    content_type: Optional[str] = None
    category: Optional[str] = None
    audience: Optional[str] = None
    time_range: TimeRange = TimeRange.ALL
    visibility: Visibility = Visibility.ALL
    status: StatusFilter = StatusFilter.ALL
    sort_order: SortOrder = SortOrder.NEWEST
    group_by: Optional[GroupBy] = None
    search: str = ""
    search_fields: frozenset[SearchField] = Field(default_factory=lambda: ALL_SEARCH_FIELDS)

    @property
    def search_active(self) -> bool:
        return bool(self.search.strip())


@dataclass
class QueryResult:
    entries: list[ChangelogEntry]
    total: int
    groups: Optional[dict[str, list[ChangelogEntry]]] = None
    search_active: bool = False


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def _is_set(value: Optional[str]) -> bool:
    return bool(value) and value != "all"


# ── Filter ───────────────────────────────────────────────


def _matches_status(entry: ChangelogEntry, status: StatusFilter) -> bool:
    if status == StatusFilter.PENDING:
        return entry.status == "draft" and entry.needs_approval
    if status == StatusFilter.APPROVED:
        return entry.status == "approved"
    if status == StatusFilter.PUBLISHED:
        return entry.status == "published" and entry.is_public
    return True


def filter_entries(
    entries: Iterable[ChangelogEntry],
    criteria: ChangelogQuery,
    now: Optional[datetime] = None,
) -> list[ChangelogEntry]:
    """Keep entries matching every criterion that is set; "all" means no-op."""
    filtered = list(entries)

    if _is_set(criteria.content_type):
        filtered = [e for e in filtered if e.content_type == criteria.content_type]
    if _is_set(criteria.category):
        filtered = [e for e in filtered if e.category == criteria.category]
    if _is_set(criteria.audience):
        filtered = [e for e in filtered if e.target_audience == criteria.audience]

    if criteria.visibility == Visibility.PUBLIC:
        filtered = [e for e in filtered if e.is_public]
    elif criteria.visibility == Visibility.PRIVATE:
        filtered = [e for e in filtered if not e.is_public]

    if criteria.status != StatusFilter.ALL:
        filtered = [e for e in filtered if _matches_status(e, criteria.status)]

    days = criteria.time_range.days
    if days:
        cutoff = _now(now) - timedelta(days=days)
        filtered = [e for e in filtered if e.published_at >= cutoff]

    return filtered


# ── Sort ─────────────────────────────────────────────────


def sort_entries(entries: Iterable[ChangelogEntry], order: SortOrder = SortOrder.NEWEST) -> list[ChangelogEntry]:
    # sorted() is stable in both directions, so ties keep their filter order
    return sorted(entries, key=lambda e: e.published_at, reverse=order == SortOrder.NEWEST)


# ── Group ────────────────────────────────────────────────


def date_group_key(published_at: datetime, now: Optional[datetime] = None) -> str:
    today = _now(now).date()
    day = published_at.astimezone(timezone.utc).date()
    delta = (today - day).days

    if delta <= 0:
        return "Today"
    if delta == 1:
        return "Yesterday"
    if delta < 7:
        return "This Week"
    if (day.year, day.month) == (today.year, today.month):
        return "This Month"
    if day.year == today.year:
        return f"{calendar.month_name[day.month]} {day.year}"
    return str(day.year)


def importance_group_key(score: float) -> str:
    if score >= HIGH_IMPACT_THRESHOLD:
        return "High Impact"
    if score >= MEDIUM_IMPACT_THRESHOLD:
        return "Medium Impact"
    return "Low Impact"


def group_key(entry: ChangelogEntry, group_by: GroupBy, now: Optional[datetime] = None) -> str:
    if group_by == GroupBy.DATE:
        return date_group_key(entry.published_at, now)
    if group_by == GroupBy.CATEGORY:
        return entry.effective_category
    return importance_group_key(entry.effective_importance)


def _order_groups(groups: dict[str, list], priority: Sequence[str]) -> dict[str, list]:
    ordered = {key: groups[key] for key in priority if key in groups}
    for key in sorted(k for k in groups if k not in ordered):
        ordered[key] = groups[key]
    return ordered


def group_entries(
    entries: Iterable[ChangelogEntry],
    group_by: GroupBy,
    now: Optional[datetime] = None,
) -> dict[str, list[ChangelogEntry]]:
    """Partition entries into labelled buckets, one bucket per entry."""
    now = _now(now)
    groups: dict[str, list[ChangelogEntry]] = {}
    for entry in entries:
        groups.setdefault(group_key(entry, group_by, now), []).append(entry)

    if group_by == GroupBy.DATE:
        return _order_groups(groups, DATE_GROUP_PRIORITY)
    if group_by == GroupBy.IMPORTANCE:
        return _order_groups(groups, IMPORTANCE_GROUP_PRIORITY)
    return groups


# ── Search ───────────────────────────────────────────────


def _field_text(entry: ChangelogEntry, search_field: SearchField) -> str:
    if search_field == SearchField.TITLE:
        return entry.title
    if search_field == SearchField.BODY:
        return entry.body
    return entry.summary or ""


def search_entries(
    entries: Iterable[ChangelogEntry],
    query: str,
    fields: Iterable[SearchField] = ALL_SEARCH_FIELDS,
) -> list[ChangelogEntry]:
    """Case-insensitive substring match across the enabled fields."""
    if not query.strip():
        return []
    needle = query.strip().lower()
    fields = [SearchField(f) for f in fields]
    return [
        e for e in entries
        if any(needle in _field_text(e, f).lower() for f in fields)
    ]


# ── Composition ──────────────────────────────────────────


def select_entries(
    entries: Sequence[ChangelogEntry],
    query: ChangelogQuery,
    now: Optional[datetime] = None,
) -> list[ChangelogEntry]:
    """Flat result for a query: search results, or filtered-then-sorted entries."""
    if query.search_active:
        return search_entries(entries, query.search, query.search_fields)
    return sort_entries(filter_entries(entries, query, now), query.sort_order)


def run_query(
    entries: Sequence[ChangelogEntry],
    query: ChangelogQuery,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> QueryResult:
    """Select, paginate, then group the page with the current group-by mode."""
    now = _now(now)
    selected = select_entries(entries, query, now)
    page = selected[offset:offset + limit] if limit is not None else selected[offset:]

    groups = None
    if query.group_by is not None:
        groups = group_entries(page, query.group_by, now)

    return QueryResult(
        entries=page,
        total=len(selected),
        groups=groups,
        search_active=query.search_active,
    )
