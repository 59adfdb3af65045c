"""
Unit tests for applying editor updates and approval decisions.

Records are plain namespaces here; no database is involved.

Run with: pytest tests/test_approval.py -v
"""
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from changelog.approval import apply_update, target_status

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _record(**overrides):
    data = {
        "id": "draft-1",
        "title": "Old title",
        "body": "Old body",
        "summary": None,
        "bullet_points": None,
        "status": "draft",
        "approval_status": "pending",
        "needs_approval": True,
        "is_public": False,
        "release_date": None,
        "approval_metadata": None,
        "updated_at": None,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


class TestTargetStatus:
    @pytest.mark.parametrize("approval_status,public,expected", [
        ("approved", True, "published"),
        ("approved", False, "approved"),
        ("approved", None, "approved"),
        ("pending", True, "draft"),
        ("draft", None, "draft"),
        ("published", None, "published"),
        ("rejected", None, "draft"),
    ])
    def test_mapping(self, approval_status, public, expected):
        assert target_status(approval_status, public) == expected


class TestApplyUpdate:
    def test_customer_facing_aliases_win(self):
        record = _record()
        apply_update(record, {
            "customer_facing_title": "New title",
            "content_title": "ignored",
            "customer_facing_description": "New body",
        }, NOW)
        assert record.title == "New title"
        assert record.body == "New body"

    def test_plain_edit_is_not_an_approval(self):
        record = _record()
        approved = apply_update(record, {"summary": "Short"}, NOW)
        assert approved is False
        assert record.summary == "Short"
        assert record.status == "draft"
        assert record.updated_at == NOW

    def test_highlights_are_cleaned(self):
        record = _record()
        apply_update(record, {"highlights": ["Keep", " ", "Also keep"]}, NOW)
        assert record.bullet_points == ["Keep", "Also keep"]

    def test_public_approval_publishes(self):
        record = _record()
        approved = apply_update(record, {"approval_status": "approved", "public_visibility": True}, NOW)
        assert approved is True
        assert record.status == "published"
        assert record.is_public is True
        assert record.needs_approval is False
        assert record.release_date == NOW
        assert record.approval_metadata["status_display"] == "Public"
        assert record.approval_metadata["approved_at"] == NOW.isoformat()

    def test_private_approval_keeps_existing_metadata(self):
        record = _record(approval_metadata={"auto_generated": True})
        apply_update(record, {"approval_status": "approved", "approved_by": "dana"}, NOW)
        assert record.status == "approved"
        assert record.release_date is None
        assert record.approval_metadata["auto_generated"] is True
        assert record.approval_metadata["approved_by"] == "dana"
        assert record.approval_metadata["status_display"] == "Private"

    def test_release_date_string_is_parsed(self):
        record = _record()
        apply_update(record, {"release_date": "2026-10-01T09:00:00Z"}, NOW)
        assert record.release_date == datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)
