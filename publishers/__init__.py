"""Publishers for pushing approved changelog entries to other systems."""

from publishers.base import BasePublisher
from publishers.jira import JiraPublisher
from publishers.slack import SlackPublisher

__all__ = ["BasePublisher", "JiraPublisher", "SlackPublisher"]


def get_publisher(name: str) -> BasePublisher | None:
    """Get the publisher registered under a name."""
    publishers = {
        "jira": JiraPublisher(),
        "slack": SlackPublisher(),
    }
    return publishers.get(name.lower())
