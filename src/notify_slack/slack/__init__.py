"""Slack API access."""

from notify_slack.slack.client import SLACK_API_URL, SlackClient, SlackError
from notify_slack.slack.sanitize import is_sensitive_header, mask_sensitive_value, sanitize_headers

__all__ = [
    "SLACK_API_URL",
    "SlackClient",
    "SlackError",
    "is_sensitive_header",
    "mask_sensitive_value",
    "sanitize_headers",
]
