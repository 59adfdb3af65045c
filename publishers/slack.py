"""Slack publisher — announces publicly approved updates via an incoming webhook."""

import logging

import httpx

from config import settings
from publishers.base import BasePublisher

logger = logging.getLogger(__name__)


def build_announcement(entry: dict, changelog_url: str) -> str:
    """Slack mrkdwn body for a product update announcement."""
    lines = [f"*{entry.get('title') or 'Product Update'}*"]

    body = entry.get("body")
    if body:
        lines.append(body[:500])

    highlights = entry.get("bullet_points") or []
    if highlights:
        lines.append("*What's New:*")
        lines.extend(f"• {h}" for h in highlights)

    resources = []
    for key, label in (("video_url", "Watch Demo"), ("image_url", "Screenshots"), ("external_link", "Learn More")):
        if entry.get(key):
            resources.append(f"<{entry[key]}|{label}>")
    if entry.get("jira_story_key"):
        resources.append(entry["jira_story_key"])
    if resources:
        lines.append(" • ".join(resources))

    lines.append(f"<{changelog_url}|View the changelog>")
    return "\n".join(lines)


class SlackPublisher(BasePublisher):
    name = "slack"

    @property
    def configured(self) -> bool:
        return bool(settings.slack_webhook_url)

    async def publish(self, content: dict) -> dict:
        """Post an announcement for an approved entry.

        Args:
            content: entry dict (title, body, bullet_points, media links, jira_story_key)
        """
        if not self.configured:
            return {"success": False, "error": "Slack webhook not configured"}

        changelog_url = f"{settings.public_base_url.rstrip('/')}/public-changelog"
        text = build_announcement(content, changelog_url)

        try:
            async with httpx.AsyncClient(timeout=15) as client:
                resp = await client.post(settings.slack_webhook_url, json={"text": text})
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Slack announcement failed for %s: %s", content.get("id"), e)
            return {"success": False, "error": str(e)}

        logger.info("Slack announcement sent for %s", content.get("id"))
        return {"success": True}
