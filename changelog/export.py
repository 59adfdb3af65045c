"""Outbound representations of changelog entries: public JSON, CSV, RSS."""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Iterable, Optional
from xml.sax.saxutils import escape

from changelog.base import ChangelogEntry
from changelog.highlights import cleanup_highlights, public_category

PUBLIC_DESCRIPTION_LIMIT = 500

CSV_COLUMNS = [
    "id",
    "title",
    "content_type",
    "target_audience",
    "status",
    "category",
    "importance_score",
    "quality_score",
    "breaking_changes",
    "is_public",
    "published_at",
    "summary",
    "tags",
]


def to_public_entry(entry: ChangelogEntry) -> dict:
    """Customer-facing shape served by the public changelog."""
    description = entry.body
    if len(description) > PUBLIC_DESCRIPTION_LIMIT:
        description = description[:PUBLIC_DESCRIPTION_LIMIT] + "..."

    return {
        "id": entry.id,
        "version": entry.version,
        "release_date": entry.published_at.isoformat(),
        "category": public_category(entry.category),
        "tags": list(entry.tags),
        "customer_facing_title": entry.title,
        "customer_facing_description": description,
        "highlights": cleanup_highlights(list(entry.bullet_points)),
        "breaking_changes": entry.breaking_changes,
        "view_count": entry.view_count,
        "upvotes": entry.upvotes,
        "feedback_count": entry.feedback_count,
        "jira_story_key": entry.jira_story_key,
    }


def entries_to_csv(entries: Iterable[ChangelogEntry]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=CSV_COLUMNS, extrasaction="ignore")
    writer.writeheader()
    for entry in entries:
        row = entry.to_dict()
        row["tags"] = ";".join(entry.tags)
        writer.writerow(row)
    return buf.getvalue()


def _cdata(text: str) -> str:
    return text.replace("]]>", "]]]]><![CDATA[>")


def _rss_item(entry: ChangelogEntry, base_url: str) -> str:
    link = f"{base_url}/public-changelog#{entry.id}"
    return (
        "    <item>\n"
        f"      <title>{escape(entry.title)}</title>\n"
        f"      <description><![CDATA[{_cdata(entry.body[:PUBLIC_DESCRIPTION_LIMIT])}]]></description>\n"
        f"      <pubDate>{format_datetime(entry.published_at, usegmt=True)}</pubDate>\n"
        f"      <guid>{escape(link)}</guid>\n"
        f"      <category>{public_category(entry.category)}</category>\n"
        f"      <link>{escape(link)}</link>\n"
        "    </item>\n"
    )


def build_rss_feed(
    entries: Iterable[ChangelogEntry],
    base_url: str,
    title: str = "Product Changelog",
    description: str = "Latest product updates and improvements",
    now: Optional[datetime] = None,
) -> str:
    """RSS 2.0 document for the public changelog."""
    base_url = base_url.rstrip("/")
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    items = "".join(_rss_item(e, base_url) for e in entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0">\n'
        "  <channel>\n"
        f"    <title>{escape(title)}</title>\n"
        f"    <description>{escape(description)}</description>\n"
        f"    <link>{escape(base_url)}/public-changelog</link>\n"
        f"    <lastBuildDate>{format_datetime(now, usegmt=True)}</lastBuildDate>\n"
        f"{items}"
        "  </channel>\n"
        "</rss>\n"
    )
