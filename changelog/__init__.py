from .base import ChangelogEntry, GroupBy, SearchField, SortOrder, StatusFilter, TimeRange, Visibility
from .pipeline import (
    ChangelogQuery,
    QueryResult,
    filter_entries,
    group_entries,
    run_query,
    search_entries,
    sort_entries,
)

__all__ = [
    "ChangelogEntry",
    "ChangelogQuery",
    "GroupBy",
    "QueryResult",
    "SearchField",
    "SortOrder",
    "StatusFilter",
    "TimeRange",
    "Visibility",
    "filter_entries",
    "group_entries",
    "run_query",
    "search_entries",
    "sort_entries",
]
