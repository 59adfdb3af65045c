"""
Pytest configuration for the changelog service test suite.

Settings are read once at import time, so the environment is pinned here
before any project module is imported: a throwaway SQLite file, no demo
seeding, and no outbound integrations configured.
"""
import asyncio
import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

_DB_PATH = Path(tempfile.gettempdir()) / f"changelog-test-{uuid.uuid4().hex}.db"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["DEMO_MODE"] = "false"
os.environ["JIRA_BASE_URL"] = ""
os.environ["JIRA_API_TOKEN"] = ""
os.environ["SLACK_WEBHOOK_URL"] = ""
os.environ["PUBLIC_BASE_URL"] = "https://changelog.example.com"

from changelog.base import ChangelogEntry  # noqa: E402

# Fixed reference time for pure pipeline tests
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_entry(entry_id: str = "e1", days_ago: float = 0, **overrides) -> ChangelogEntry:
    """Build a ChangelogEntry published `days_ago` days before NOW."""
    data = {
        "id": entry_id,
        "title": f"Entry {entry_id}",
        "body": f"Body of {entry_id}",
        "content_type": "feature_release",
        "target_audience": "customers",
        "status": "published",
        "quality_score": 0.9,
        "published_at": NOW - timedelta(days=days_ago),
        "is_public": True,
    }
    data.update(overrides)
    return ChangelogEntry(**data)


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def now():
    return NOW


# ---------------------------------------------------------------------------
# Database-backed API fixtures
# ---------------------------------------------------------------------------

def _record_rows(now: datetime) -> list[dict]:
    return [
        {
            "id": "feat-today",
            "title": "Realtime Analytics Dashboard",
            "body": "Live charts and customizable widgets for every workspace.",
            "content_type": "feature_release",
            "target_audience": "customers",
            "status": "published",
            "approval_status": "approved",
            "quality_score": 0.9,
            "summary": "Live analytics for everyone",
            "bullet_points": ["Live charts", "Custom widgets"],
            "tags": ["analytics"],
            "category": "feature_update",
            "importance_score": 0.85,
            "is_public": True,
            "version": "v2.4.2",
            "published_at": now - timedelta(hours=1),
        },
        {
            "id": "perf-week",
            "title": "Faster API Responses",
            "body": "Rate limits raised and latency reduced across endpoints.",
            "content_type": "performance_improvement",
            "target_audience": "customers",
            "status": "published",
            "approval_status": "approved",
            "quality_score": 0.8,
            "category": "performance_improvement",
            "importance_score": 0.65,
            "is_public": True,
            "published_at": now - timedelta(days=3),
        },
        {
            "id": "internal-month",
            "title": "CS Query Interface",
            "body": "Internal search tool for customer success teams.",
            "content_type": "feature_release",
            "target_audience": "internal_team",
            "status": "published",
            "approval_status": "approved",
            "quality_score": 0.7,
            "is_public": False,
            "published_at": now - timedelta(days=20),
        },
        {
            "id": "fix-old",
            "title": "Export Timeout Fix",
            "body": "Large exports no longer time out.",
            "content_type": "bug_fix",
            "target_audience": "customers",
            "status": "published",
            "approval_status": "approved",
            "quality_score": 0.6,
            "category": "bug_fix",
            "importance_score": 0.3,
            "is_public": True,
            "published_at": now - timedelta(days=120),
        },
        {
            "id": "draft-pending",
            "title": "Bulk Approvals",
            "body": "Approve several drafts at once.",
            "content_type": "changelog_entry",
            "target_audience": "internal_team",
            "status": "draft",
            "approval_status": "pending",
            "needs_approval": True,
            "quality_score": 0.75,
            "category": "feature_update",
            "jira_story_key": "PLAT-301",
            "is_public": False,
            "published_at": now - timedelta(days=2),
        },
    ]


async def _reset_database(now: datetime):
    from db import async_session, engine
    from models import Base, ChangelogEntryRecord

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        for row in _record_rows(now):
            session.add(ChangelogEntryRecord(**row))
        await session.commit()


@pytest.fixture
def seeded_db():
    """Fresh database with five entries published relative to the real clock."""
    asyncio.run(_reset_database(datetime.now(timezone.utc)))
    yield


@pytest.fixture
def client(seeded_db):
    from fastapi.testclient import TestClient

    from main import app

    with TestClient(app) as test_client:
        yield test_client


def pytest_sessionfinish(session, exitstatus):
    if _DB_PATH.exists():
        _DB_PATH.unlink()
