#!/usr/bin/env python3
"""
Demo data seeding script for the changelog service.

Seeds a spread of changelog entries covering:
- Every date bucket (today, yesterday, this week, this month, older months, last year)
- High/medium/low impact tiers, plus entries missing category or importance
- Public published entries, private entries and drafts awaiting approval

Run with: python scripts/seed_demo_data.py
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from sqlalchemy import delete, func, select

# Add parent dir to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from db import async_session, create_tables
from models import ChangelogEntryRecord, ChangelogFeedback, ChangelogView

logger = logging.getLogger(__name__)


# ============================================================================
# Demo entries
# ============================================================================

DEMO_ENTRIES = [
    {
        "id": "entry_001",
        "title": "New Dashboard Analytics Feature",
        "body": (
            "We've launched a comprehensive analytics dashboard that provides real-time insights "
            "into your product usage. This new feature includes interactive charts, customizable "
            "filters, and automated reporting capabilities."
        ),
        "content_type": "feature_release",
        "target_audience": "customers",
        "status": "published",
        "quality_score": 0.92,
        "age_days": 1,
        "summary": "New analytics dashboard with real-time insights and customizable reports",
        "bullet_points": [
            "Interactive charts and graphs",
            "Customizable date ranges and filters",
            "Automated report generation",
            "Export data to CSV/PDF",
        ],
        "category": "feature_update",
        "importance_score": 0.8,
        "tags": ["analytics", "dashboard", "reporting"],
        "is_public": True,
        "version": "v2.4.2",
        "jira_story_key": "PLAT-245",
    },
    {
        "id": "entry_002",
        "title": "API Rate Limit Optimization",
        "body": (
            "We've significantly improved our API performance by optimizing rate limiting algorithms. "
            "Enterprise customers now enjoy 50% higher rate limits, and we've reduced response times "
            "by 30% across all endpoints."
        ),
        "content_type": "performance_improvement",
        "target_audience": "customers",
        "status": "published",
        "quality_score": 0.88,
        "age_days": 3,
        "summary": "API performance improvements with higher rate limits and faster response times",
        "bullet_points": [
            "50% higher rate limits for enterprise users",
            "30% faster response times",
            "Improved error handling",
            "Better caching mechanisms",
        ],
        "category": "performance_improvement",
        "importance_score": 0.7,
        "tags": ["api", "performance", "enterprise"],
        "is_public": True,
        "version": "v2.4.1",
    },
    {
        "id": "entry_003",
        "title": "Security Update: Enhanced Authentication",
        "body": (
            "We've implemented enhanced security measures including multi-factor authentication (MFA), "
            "improved session management, and advanced threat detection. All users are encouraged to "
            "enable MFA from their account settings."
        ),
        "content_type": "security_update",
        "target_audience": "customers",
        "status": "published",
        "quality_score": 0.95,
        "age_days": 7,
        "summary": "Enhanced security with MFA, better session management, and threat detection",
        "bullet_points": [
            "Multi-factor authentication available",
            "Improved session security",
            "Advanced threat detection",
            "Automatic security alerts",
        ],
        "category": "security_update",
        "importance_score": 0.9,
        "tags": ["security", "authentication", "mfa"],
        "is_public": True,
        "version": "v2.4.0",
    },
    {
        "id": "entry_004",
        "title": "New Slack Integration",
        "body": (
            "Connect your workspace with Slack for seamless notifications and updates. Get instant "
            "alerts for important events, approval requests, and system updates directly in your "
            "Slack channels."
        ),
        "content_type": "integration_update",
        "target_audience": "customers",
        "status": "published",
        "quality_score": 0.85,
        "age_days": 14,
        "summary": "New Slack integration for notifications and workspace updates",
        "bullet_points": [
            "Real-time Slack notifications",
            "Customizable alert preferences",
            "Channel-specific updates",
            "Easy one-click setup",
        ],
        "category": "integration_update",
        "importance_score": 0.6,
        "tags": ["slack", "integration", "notifications"],
        "is_public": True,
    },
    {
        "id": "entry_005",
        "title": "Customer Success Query Interface",
        "body": (
            "Introducing our new CS Query interface that allows customer success teams to quickly "
            "search and analyze customer data, interactions, and insights. This powerful tool includes "
            "advanced filtering, AI-powered recommendations, and comprehensive customer profiles."
        ),
        "content_type": "feature_release",
        "target_audience": "internal_team",
        "status": "published",
        "quality_score": 0.90,
        "age_days": 21,
        "summary": "New CS Query interface for customer success teams with AI-powered insights",
        "bullet_points": [
            "Advanced customer search and filtering",
            "AI-powered recommendations",
            "Comprehensive customer profiles",
            "Integration with support tickets",
        ],
        "category": "feature_update",
        "importance_score": 0.8,
        "tags": ["customer-success", "ai", "search"],
        "is_public": False,
    },
    {
        "id": "entry_006",
        "title": "Fixed CSV Export Timeouts",
        "body": "Large CSV exports no longer time out. Exports over 50k rows are now streamed in chunks.",
        "content_type": "bug_fix",
        "target_audience": "customers",
        "status": "published",
        "quality_score": 0.81,
        "age_days": 75,
        "summary": "CSV exports of any size now complete reliably",
        "category": "bug_fix",
        "importance_score": 0.4,
        "tags": ["export", "bug fix"],
        "is_public": True,
    },
    {
        "id": "entry_007",
        "title": "Template Library Refresh",
        "body": "Over 200 refreshed templates with updated brand kits and layout presets.",
        "content_type": "product_announcement",
        "target_audience": "customers",
        "status": "published",
        "quality_score": 0.78,
        "age_days": 400,
        "tags": ["templates"],
        "is_public": True,
    },
    {
        "id": "entry_008",
        "title": "Bulk Approval for Changelog Drafts",
        "body": "Editors can now approve several changelog drafts at once from the admin queue.",
        "content_type": "changelog_entry",
        "target_audience": "internal_team",
        "status": "draft",
        "approval_status": "pending",
        "needs_approval": True,
        "quality_score": 0.74,
        "age_days": 0,
        "category": "feature_update",
        "jira_story_key": "PLAT-301",
        "is_public": False,
    },
]


async def seed_entries(session, now: datetime) -> int:
    """Insert demo entries; returns the number inserted."""
    for item in DEMO_ENTRIES:
        data = dict(item)
        age_days = data.pop("age_days")
        published_at = now - timedelta(days=age_days)
        session.add(ChangelogEntryRecord(
            approval_status=data.pop("approval_status", "approved"),
            published_at=published_at,
            release_date=published_at if data.get("is_public") else None,
            created_at=published_at,
            updated_at=published_at,
            **data,
        ))
    await session.commit()
    return len(DEMO_ENTRIES)


async def seed_demo_data(clear_existing: bool = False, verbose: bool = False):
    """Seed demo entries into the database (skipped when entries already exist)."""
    if verbose:
        print("=" * 70)
        print("Seeding changelog demo data")
        print("=" * 70)

    await create_tables()

    async with async_session() as session:
        if clear_existing:
            logger.info("Clearing existing changelog data...")
            await session.execute(delete(ChangelogFeedback))
            await session.execute(delete(ChangelogView))
            await session.execute(delete(ChangelogEntryRecord))
            await session.commit()
        else:
            existing = (await session.execute(
                select(func.count()).select_from(ChangelogEntryRecord)
            )).scalar_one()
            if existing:
                logger.info("Database already has %d entries, skipping seed", existing)
                return

        count = await seed_entries(session, datetime.now(timezone.utc))
        logger.info("Seeded %d changelog entries", count)

    if verbose:
        print(f"Seeded {count} entries")
        print("\nNext steps:")
        print("1. Start the service: python main.py")
        print("2. Browse: http://localhost:8001/changelog?groupBy=date")
        print()


async def main():
    """CLI entry point for manual seeding."""
    await seed_demo_data(clear_existing=True, verbose=True)


if __name__ == "__main__":
    asyncio.run(main())
