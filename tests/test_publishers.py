"""
Unit tests for the Jira and Slack publishers.

No network calls: httpx.AsyncClient is patched with mocks and settings are
patched per test.

Run with: pytest tests/test_publishers.py -v
"""
import asyncio
import base64
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from config import settings
from publishers import JiraPublisher, SlackPublisher, get_publisher
from publishers.slack import build_announcement


def _mock_client(method: str, response=None, side_effect=None):
    """Patchable stand-in for `httpx.AsyncClient(...)` used as an async context manager."""
    client = MagicMock()
    setattr(client, method, AsyncMock(return_value=response, side_effect=side_effect))
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=client)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory, client


def _ok_response():
    resp = MagicMock()
    resp.raise_for_status = MagicMock()
    return resp


def _error_response(status: int, url: str):
    request = httpx.Request("PUT", url)
    response = httpx.Response(status, text="nope", request=request)
    resp = MagicMock()
    resp.raise_for_status = MagicMock(
        side_effect=httpx.HTTPStatusError("boom", request=request, response=response)
    )
    return resp


# ===========================================================================
# Jira
# ===========================================================================

class TestJiraPublisher:
    def test_unconfigured_flags_manual_update(self):
        with patch.object(settings, "jira_base_url", ""), patch.object(settings, "jira_api_token", ""):
            result = asyncio.run(JiraPublisher().update_tldr("PLAT-1", "Short"))
        assert result["success"] is False
        assert result["requires_manual_update"] is True

    def test_basic_auth_put_to_issue(self):
        factory, client = _mock_client("put", response=_ok_response())
        with patch.object(settings, "jira_base_url", "https://acme.atlassian.net/"), \
                patch.object(settings, "jira_api_token", "tok"), \
                patch.object(settings, "jira_email", "ops@acme.io"), \
                patch("publishers.jira.httpx.AsyncClient", factory):
            result = asyncio.run(JiraPublisher().publish({"issue_key": "PLAT-9", "tldr": "Live charts"}))

        assert result["success"] is True
        assert result["updated_field"] == settings.jira_tldr_field_id
        args, kwargs = client.put.call_args
        assert args[0] == "https://acme.atlassian.net/rest/api/2/issue/PLAT-9"
        assert kwargs["json"] == {"fields": {settings.jira_tldr_field_id: "Live charts"}}
        assert kwargs["auth"] == ("ops@acme.io", "tok")
        assert "Authorization" not in kwargs["headers"]

    def test_basic_auth_header_on_the_wire(self):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, json={})

        transport = httpx.MockTransport(handler)
        real_client = httpx.AsyncClient

        def client_factory(**kwargs):
            return real_client(transport=transport, **kwargs)

        with patch.object(settings, "jira_base_url", "https://acme.atlassian.net"), \
                patch.object(settings, "jira_api_token", "tok"), \
                patch.object(settings, "jira_email", "ops@acme.io"), \
                patch("publishers.jira.httpx.AsyncClient", client_factory):
            result = asyncio.run(JiraPublisher().update_tldr("PLAT-9", "Live charts"))

        assert result["success"] is True
        expected = "Basic " + base64.b64encode(b"ops@acme.io:tok").decode()
        assert sent[0].headers["Authorization"] == expected
        assert sent[0].method == "PUT"

    def test_bearer_auth_without_email(self):
        factory, client = _mock_client("put", response=_ok_response())
        with patch.object(settings, "jira_base_url", "https://jira.internal"), \
                patch.object(settings, "jira_api_token", "pat"), \
                patch.object(settings, "jira_email", ""), \
                patch("publishers.jira.httpx.AsyncClient", factory):
            asyncio.run(JiraPublisher().update_tldr("OPS-2", "x"))
        kwargs = client.put.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer pat"
        assert kwargs["auth"] is None

    def test_http_error_is_reported_not_raised(self):
        url = "https://jira.internal/rest/api/2/issue/OPS-3"
        factory, _ = _mock_client("put", response=_error_response(401, url))
        with patch.object(settings, "jira_base_url", "https://jira.internal"), \
                patch.object(settings, "jira_api_token", "pat"), \
                patch("publishers.jira.httpx.AsyncClient", factory):
            result = asyncio.run(JiraPublisher().update_tldr("OPS-3", "x"))
        assert result["success"] is False
        assert "401" in result["error"]
        assert result["requires_manual_update"] is True

    def test_connection_error_is_reported_not_raised(self):
        factory, _ = _mock_client("put", side_effect=httpx.ConnectError("refused"))
        with patch.object(settings, "jira_base_url", "https://jira.internal"), \
                patch.object(settings, "jira_api_token", "pat"), \
                patch("publishers.jira.httpx.AsyncClient", factory):
            result = asyncio.run(JiraPublisher().update_tldr("OPS-4", "x"))
        assert result == {
            "success": False,
            "issue_key": "OPS-4",
            "error": "refused",
            "requires_manual_update": True,
        }


# ===========================================================================
# Slack
# ===========================================================================

class TestSlackPublisher:
    def test_announcement_text(self):
        text = build_announcement(
            {
                "title": "Live Charts",
                "body": "Charts update in real time.",
                "bullet_points": ["Streaming", "Widgets"],
                "video_url": "https://video.example.com/1",
                "jira_story_key": "PLAT-9",
            },
            "https://changelog.example.com/public-changelog",
        )
        assert text.startswith("*Live Charts*")
        assert "• Streaming" in text
        assert "<https://video.example.com/1|Watch Demo>" in text
        assert "PLAT-9" in text
        assert text.endswith("<https://changelog.example.com/public-changelog|View the changelog>")

    def test_unconfigured_is_skipped(self):
        with patch.object(settings, "slack_webhook_url", ""):
            publisher = SlackPublisher()
            assert publisher.configured is False
            assert asyncio.run(publisher.publish({"id": "x"}))["success"] is False

    def test_posts_to_webhook(self):
        factory, client = _mock_client("post", response=_ok_response())
        with patch.object(settings, "slack_webhook_url", "https://hooks.slack.com/services/T/B/X"), \
                patch("publishers.slack.httpx.AsyncClient", factory):
            result = asyncio.run(SlackPublisher().publish({"id": "e1", "title": "Hello"}))
        assert result == {"success": True}
        args, kwargs = client.post.call_args
        assert args[0] == "https://hooks.slack.com/services/T/B/X"
        assert kwargs["json"]["text"].startswith("*Hello*")


def test_get_publisher_lookup():
    assert isinstance(get_publisher("JIRA"), JiraPublisher)
    assert isinstance(get_publisher("slack"), SlackPublisher)
    assert get_publisher("medium") is None
