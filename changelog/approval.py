"""Apply editor updates and approval decisions to a stored changelog entry."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from changelog.base import as_utc
from changelog.highlights import cleanup_highlights

logger = logging.getLogger(__name__)

# approval_status sent by the editor -> stored entry status
APPROVAL_STATUS_MAP = {
    "pending": "draft",
    "draft": "draft",
    "approved": "approved",
    "published": "published",
}

# Editor field (incl. customer-facing aliases) -> record attribute; first alias present wins
_FIELD_ALIASES = {
    "title": ("customer_facing_title", "content_title", "title"),
    "body": ("customer_facing_description", "generated_content", "body"),
    "summary": ("tldr_summary", "summary"),
    "bullet_points": ("highlights", "tldr_bullet_points", "bullet_points"),
}

_PASSTHROUGH_FIELDS = (
    "tags",
    "category",
    "importance_score",
    "breaking_changes",
    "migration_notes",
    "external_link",
    "video_url",
    "image_url",
    "version",
)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return as_utc(value)
    return as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


def target_status(approval_status: str, public_visibility: Optional[bool]) -> str:
    if approval_status == "approved":
        return "published" if public_visibility else "approved"
    return APPROVAL_STATUS_MAP.get(approval_status, "draft")


def apply_update(record, updates: dict, now: Optional[datetime] = None) -> bool:
    """Copy allowed editor fields onto the record.

    Returns True when this update approved the entry, so callers can fire
    the approval side effects (Jira TL;DR, Slack announcement).
    """
    now = now or datetime.now(timezone.utc)

    for attr, aliases in _FIELD_ALIASES.items():
        for alias in aliases:
            if updates.get(alias) is not None:
                value = updates[alias]
                if attr == "bullet_points":
                    value = cleanup_highlights(value)
                setattr(record, attr, value)
                break

    for attr in _PASSTHROUGH_FIELDS:
        if attr in updates:
            setattr(record, attr, updates[attr])

    public_visibility = updates.get("public_visibility")
    if public_visibility is not None:
        record.is_public = bool(public_visibility)

    if "release_date" in updates:
        record.release_date = _parse_datetime(updates["release_date"])

    approved = False
    approval_status = updates.get("approval_status")
    if approval_status:
        record.status = target_status(approval_status, public_visibility)
        record.approval_status = approval_status

        if approval_status == "approved":
            approved = True
            record.needs_approval = False
            record.approval_metadata = {
                **(record.approval_metadata or {}),
                "source": "app_approval",
                "approved_by": updates.get("approved_by") or "app_user",
                "approved_at": now.isoformat(),
                "approval_method": "app_interface",
                "public_visibility": bool(public_visibility),
                "status_display": "Public" if public_visibility else "Private",
            }
            if record.status == "published" and record.release_date is None:
                record.release_date = now
        logger.info("Entry %s moved to status '%s' (%s)", record.id, record.status, approval_status)

    record.updated_at = now
    return approved
