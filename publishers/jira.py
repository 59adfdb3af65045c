"""Jira publisher — writes the approved TL;DR back onto the source story.

Uses the Jira REST API v2 issue edit endpoint:
- PUT /rest/api/2/issue/{key} with {"fields": {<tldr field>: <text>}}
- Atlassian Cloud: basic auth with account email + API token
- Server/Data Center: bearer personal access token

Failures never raise; they come back flagged for a manual update.
"""

import logging

import httpx

from config import settings
from publishers.base import BasePublisher

logger = logging.getLogger(__name__)


class JiraPublisher(BasePublisher):
    """Sync changelog TL;DRs to Jira stories."""

    name = "jira"

    @property
    def configured(self) -> bool:
        return bool(settings.jira_base_url and settings.jira_api_token)

    def _auth(self) -> tuple[str, str] | None:
        """Basic auth for Atlassian Cloud; None means the bearer header is used."""
        if settings.jira_email:
            return (settings.jira_email, settings.jira_api_token)
        return None

    def _headers(self) -> dict:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if not settings.jira_email:
            headers["Authorization"] = f"Bearer {settings.jira_api_token}"
        return headers

    async def publish(self, content: dict) -> dict:
        """Update the TL;DR field of a Jira issue.

        Args:
            content: {
                "issue_key": str,   # e.g. "PLAT-245" (required)
                "tldr": str,        # text to store in the TL;DR field (required)
            }
        """
        return await self.update_tldr(content.get("issue_key", ""), content.get("tldr", ""))

    async def update_tldr(self, issue_key: str, tldr: str) -> dict:
        field_id = settings.jira_tldr_field_id

        if not self.configured:
            return {
                "success": False,
                "issue_key": issue_key,
                "error": "JIRA credentials not configured",
                "requires_manual_update": True,
            }

        url = f"{settings.jira_base_url.rstrip('/')}/rest/api/2/issue/{issue_key}"
        try:
            async with httpx.AsyncClient(timeout=30) as client:
                resp = await client.put(
                    url,
                    headers=self._headers(),
                    auth=self._auth(),
                    json={"fields": {field_id: tldr}},
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Jira update failed for %s: %s %s",
                issue_key, e.response.status_code, e.response.text[:200],
            )
            return {
                "success": False,
                "issue_key": issue_key,
                "error": f"JIRA API error: {e.response.status_code}",
                "requires_manual_update": True,
            }
        except httpx.HTTPError as e:
            logger.warning("Jira update failed for %s: %s", issue_key, e)
            return {
                "success": False,
                "issue_key": issue_key,
                "error": str(e) or "Unknown JIRA REST API error",
                "requires_manual_update": True,
            }

        logger.info("Jira issue %s updated with TL;DR", issue_key)
        return {
            "success": True,
            "issue_key": issue_key,
            "message": f"JIRA issue {issue_key} updated with TL;DR",
            "updated_field": field_id,
            "tldr": tldr,
        }
