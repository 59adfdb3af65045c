"""FastAPI routes for the changelog API."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import delete, desc, select

from changelog.approval import apply_update
from changelog.base import (
    ChangelogEntry,
    GroupBy,
    SearchField,
    SortOrder,
    StatusFilter,
    TimeRange,
    Visibility,
)
from changelog.export import build_rss_feed, entries_to_csv, to_public_entry
from changelog.highlights import PUBLIC_CATEGORIES, public_category
from changelog.pipeline import ALL_SEARCH_FIELDS, ChangelogQuery, run_query, select_entries
from changelog.stats import collect_categories, compute_stats
from config import settings
from db import async_session
from models import ChangelogEntryRecord, ChangelogFeedback, ChangelogView
from publishers import get_publisher

logger = logging.getLogger(__name__)
router = APIRouter()

_PUBLIC_TIMEFRAME_DAYS = {"7d": 7, "30d": 30, "90d": 90}
_PUBLIC_TIMEFRAME_FALLBACK_DAYS = 365


# ── Pydantic models ─────────────────────────────────────

class ChangelogAction(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str
    entry_id: Optional[str] = Field(None, alias="entryId")
    user_id: Optional[str] = Field(None, alias="userId")


class PublicChangelogAction(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str
    entry_id: Optional[str] = Field(None, alias="entryId")
    user_agent: Optional[str] = Field(None, alias="userAgent")
    feedback: Optional[str] = None
    email: Optional[str] = None


class EntryUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    content_title: Optional[str] = None
    customer_facing_title: Optional[str] = None
    body: Optional[str] = None
    generated_content: Optional[str] = None
    customer_facing_description: Optional[str] = None
    summary: Optional[str] = None
    tldr_summary: Optional[str] = None
    bullet_points: Optional[list[str]] = None
    tldr_bullet_points: Optional[list[str]] = None
    highlights: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    category: Optional[str] = None
    importance_score: Optional[float] = Field(None, ge=0.0, le=1.0)
    breaking_changes: Optional[bool] = None
    migration_notes: Optional[str] = None
    external_link: Optional[str] = None
    video_url: Optional[str] = None
    image_url: Optional[str] = None
    version: Optional[str] = None
    approval_status: Optional[str] = None
    approved_by: Optional[str] = None
    public_visibility: Optional[bool] = None
    release_date: Optional[datetime] = None


class VisibilityUpdate(BaseModel):
    is_public: bool


# ── Helpers ─────────────────────────────────────────────

async def _load_entries(
    session, public_only: bool = False, approved_only: bool = False,
) -> list[ChangelogEntry]:
    query = select(ChangelogEntryRecord).order_by(desc(ChangelogEntryRecord.published_at))
    if public_only:
        query = query.where(
            ChangelogEntryRecord.is_public.is_(True),
            ChangelogEntryRecord.status == "published",
        )
    if approved_only:
        # stats and filter options only describe released, approved entries
        query = query.where(
            ChangelogEntryRecord.status == "published",
            ChangelogEntryRecord.approval_status == "approved",
        )
    result = await session.execute(query)
    return [ChangelogEntry.from_record(r) for r in result.scalars().all()]


async def _get_record(session, entry_id: str) -> ChangelogEntryRecord:
    record = (await session.execute(
        select(ChangelogEntryRecord).where(ChangelogEntryRecord.id == entry_id)
    )).scalar_one_or_none()
    if not record:
        raise HTTPException(404, f"Changelog entry {entry_id} not found")
    return record


def _record_detail(record: ChangelogEntryRecord) -> dict:
    data = ChangelogEntry.from_record(record).to_dict()
    data.update({
        "approval_status": record.approval_status,
        "needs_approval": bool(record.needs_approval),
        "migration_notes": record.migration_notes,
        "external_link": record.external_link,
        "video_url": record.video_url,
        "image_url": record.image_url,
        "approval_metadata": record.approval_metadata,
        "release_date": record.release_date.isoformat() if record.release_date else None,
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    })
    return data


def _parse_search_fields(raw: Optional[str]) -> frozenset[SearchField]:
    if not raw:
        return ALL_SEARCH_FIELDS
    try:
        return frozenset(SearchField(part.strip()) for part in raw.split(",") if part.strip())
    except ValueError:
        raise HTTPException(400, f"Invalid searchFields '{raw}' (use title, body, summary)")


def _build_query(
    content_type: Optional[str],
    category: Optional[str],
    audience: Optional[str],
    time_range: TimeRange,
    visibility: Visibility,
    status: StatusFilter,
    sort_order: SortOrder,
    group_by: Optional[GroupBy],
    q: Optional[str],
    search_fields: Optional[str],
) -> ChangelogQuery:
    return ChangelogQuery(
        content_type=content_type,
        category=category,
        audience=audience,
        time_range=time_range,
        visibility=visibility,
        status=status,
        sort_order=sort_order,
        group_by=group_by,
        search=q or "",
        search_fields=_parse_search_fields(search_fields),
    )


def _page_limit(limit: Optional[int], default: int) -> int:
    return min(limit or default, settings.max_page_limit)


# ── Admin changelog ─────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/changelog")
async def get_changelog(
    content_type: Optional[str] = Query(None, alias="contentType"),
    category: Optional[str] = None,
    audience: Optional[str] = None,
    time_range: TimeRange = Query(TimeRange.ALL, alias="timeRange"),
    visibility: Visibility = Visibility.ALL,
    status: StatusFilter = StatusFilter.ALL,
    sort_order: SortOrder = Query(SortOrder.NEWEST, alias="sortOrder"),
    group_by: Optional[GroupBy] = Query(None, alias="groupBy"),
    q: Optional[str] = None,
    search_fields: Optional[str] = Query(None, alias="searchFields"),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
):
    """Entries after filter/sort (or search), paginated, optionally grouped."""
    query = _build_query(
        content_type, category, audience, time_range, visibility,
        status, sort_order, group_by, q, search_fields,
    )
    limit = _page_limit(limit, settings.default_page_limit)

    async with async_session() as session:
        entries = await _load_entries(session)

    result = run_query(entries, query, limit=limit, offset=offset)

    body = {
        "success": True,
        "entries": [e.to_dict() for e in result.entries],
        "pagination": {
            "limit": limit,
            "offset": offset,
            "total": result.total,
            "hasMore": offset + limit < result.total,
        },
        "metadata": {
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
            "searchActive": result.search_active,
            "groupBy": query.group_by.value if query.group_by else None,
        },
    }
    if result.groups is not None:
        body["groups"] = [
            {"key": key, "count": len(items), "entries": [e.to_dict() for e in items]}
            for key, items in result.groups.items()
        ]
    return body


@router.post("/changelog")
async def changelog_action(data: ChangelogAction):
    """Action-style endpoint: get_stats, get_categories, mark_viewed."""
    if data.action == "get_stats":
        async with async_session() as session:
            entries = await _load_entries(session, approved_only=True)
        return {"success": True, "stats": compute_stats(entries)}

    if data.action == "get_categories":
        async with async_session() as session:
            entries = await _load_entries(session, approved_only=True)
        return {"success": True, "categories": collect_categories(entries)}

    if data.action == "mark_viewed":
        if not data.entry_id:
            raise HTTPException(400, "entryId is required")
        async with async_session() as session:
            record = await _get_record(session, data.entry_id)
            record.view_count = (record.view_count or 0) + 1
            session.add(ChangelogView(entry_id=record.id, user_id=data.user_id, source="admin"))
            await session.commit()
        return {"success": True, "message": "Entry marked as viewed"}

    raise HTTPException(400, "Invalid action")


@router.get("/changelog/export")
async def export_changelog(
    content_type: Optional[str] = Query(None, alias="contentType"),
    category: Optional[str] = None,
    audience: Optional[str] = None,
    time_range: TimeRange = Query(TimeRange.ALL, alias="timeRange"),
    visibility: Visibility = Visibility.ALL,
    status: StatusFilter = StatusFilter.ALL,
    sort_order: SortOrder = Query(SortOrder.NEWEST, alias="sortOrder"),
    q: Optional[str] = None,
    search_fields: Optional[str] = Query(None, alias="searchFields"),
):
    """CSV download of the current (unpaginated) view."""
    query = _build_query(
        content_type, category, audience, time_range, visibility,
        status, sort_order, None, q, search_fields,
    )
    async with async_session() as session:
        entries = await _load_entries(session)

    selected = select_entries(entries, query)
    filename = f"changelog-{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    logger.info("Exporting %d changelog entries to %s", len(selected), filename)
    return Response(
        content=entries_to_csv(selected),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/changelog/{entry_id}")
async def get_changelog_entry(entry_id: str):
    async with async_session() as session:
        record = await _get_record(session, entry_id)
    return {"success": True, "entry": _record_detail(record)}


@router.put("/changelog/{entry_id}")
async def update_changelog_entry(entry_id: str, data: EntryUpdate):
    """Edit an entry; approving it also syncs Jira and announces on Slack."""
    async with async_session() as session:
        record = await _get_record(session, entry_id)
        approved = apply_update(record, data.model_dump(exclude_unset=True))
        await session.commit()
        detail = _record_detail(record)

    body = {"success": True, "entry": detail, "message": "Entry updated successfully"}
    if approved:
        body.update(await _run_approval_side_effects(detail, announce=bool(data.public_visibility)))
    return body


async def _run_approval_side_effects(entry: dict, announce: bool) -> dict:
    """Jira TL;DR sync, and a Slack announcement when the approval made the entry public.

    Failures never fail the update.
    """
    results = {}

    if entry.get("jira_story_key"):
        jira = get_publisher("jira")
        try:
            results["jiraUpdateResult"] = await jira.publish(
                {"issue_key": entry["jira_story_key"], "tldr": entry["title"]}
            )
        except Exception as e:
            logger.warning("Jira sync for %s failed (non-blocking): %s", entry["id"], e)
            results["jiraUpdateResult"] = {
                "success": False,
                "issue_key": entry["jira_story_key"],
                "error": str(e),
                "requires_manual_update": True,
            }

    if announce:
        slack = get_publisher("slack")
        if slack.configured:
            try:
                results["slackNotification"] = await slack.publish(entry)
            except Exception as e:
                logger.warning("Slack announcement for %s failed (non-blocking): %s", entry["id"], e)
                results["slackNotification"] = {"success": False, "error": str(e)}

    return results


@router.delete("/changelog/{entry_id}")
async def delete_changelog_entry(entry_id: str):
    async with async_session() as session:
        record = await _get_record(session, entry_id)
        await session.execute(delete(ChangelogFeedback).where(ChangelogFeedback.entry_id == entry_id))
        await session.execute(delete(ChangelogView).where(ChangelogView.entry_id == entry_id))
        await session.delete(record)
        await session.commit()
    logger.info("Deleted changelog entry %s", entry_id)
    return {"success": True, "message": "Changelog entry deleted successfully"}


@router.patch("/changelog/{entry_id}/visibility")
async def update_visibility(entry_id: str, data: VisibilityUpdate):
    async with async_session() as session:
        record = await _get_record(session, entry_id)
        record.is_public = data.is_public
        record.updated_at = datetime.now(timezone.utc)
        await session.commit()
    logger.info("Entry %s visibility -> %s", entry_id, "public" if data.is_public else "private")
    return {"success": True, "message": "Visibility updated successfully", "is_public": data.is_public}


# ── Public changelog ────────────────────────────────────

@router.get("/public-changelog")
async def get_public_changelog(
    category: Optional[str] = None,
    timeframe: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    format: Optional[str] = None,
):
    """Published public entries as JSON, or as an RSS feed with format=rss."""
    limit = _page_limit(limit, settings.public_page_limit)

    async with async_session() as session:
        entries = await _load_entries(session, public_only=True)

    if timeframe and timeframe != "all":
        days = _PUBLIC_TIMEFRAME_DAYS.get(timeframe, _PUBLIC_TIMEFRAME_FALLBACK_DAYS)
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        entries = [e for e in entries if e.published_at >= cutoff]

    if category and category != "all":
        entries = [e for e in entries if public_category(e.category) == category]

    total = len(entries)
    page = entries[offset:offset + limit]

    if format == "rss":
        feed = build_rss_feed(
            page, settings.public_base_url,
            title=settings.feed_title, description=settings.feed_description,
        )
        return Response(
            content=feed,
            media_type="application/rss+xml",
            headers={"Cache-Control": "public, max-age=3600"},
        )

    return {
        "success": True,
        "changelog": [to_public_entry(e) for e in page],
        "pagination": {
            "limit": limit,
            "offset": offset,
            "total": total,
            "hasMore": offset + limit < total,
        },
        "metadata": {
            "categories": PUBLIC_CATEGORIES,
            "totalPublishedVersions": total,
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
            "apiVersion": "1.0",
        },
    }


@router.post("/public-changelog")
async def public_changelog_action(data: PublicChangelogAction):
    """Action-style endpoint: track_view, submit_feedback, upvote."""
    if data.action not in ("track_view", "submit_feedback", "upvote"):
        raise HTTPException(400, "Invalid action")
    if not data.entry_id:
        raise HTTPException(400, "entryId is required")
    if data.action == "submit_feedback" and not (data.feedback or "").strip():
        raise HTTPException(400, "feedback is required")

    async with async_session() as session:
        record = await _get_record(session, data.entry_id)

        if data.action == "track_view":
            record.view_count = (record.view_count or 0) + 1
            session.add(ChangelogView(entry_id=record.id, user_agent=data.user_agent, source="public"))
            await session.commit()
            return {"success": True, "message": "View tracked"}

        if data.action == "submit_feedback":
            record.feedback_count = (record.feedback_count or 0) + 1
            session.add(ChangelogFeedback(entry_id=record.id, feedback=data.feedback.strip(), email=data.email))
            await session.commit()
            logger.info("Feedback submitted for entry %s", record.id)
            return {"success": True, "message": "Feedback submitted successfully"}

        record.upvotes = (record.upvotes or 0) + 1
        await session.commit()
        return {"success": True, "message": "Upvote registered", "upvotes": record.upvotes}
