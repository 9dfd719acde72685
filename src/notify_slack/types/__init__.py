"""Type definitions for notify_slack."""

from notify_slack.types.config import DEFAULT_INTERVAL, Config
from notify_slack.types.slack import PostFileParam, PostTextParam, UploadURLParam

__all__ = [
    "DEFAULT_INTERVAL",
    "Config",
    "PostFileParam",
    "PostTextParam",
    "UploadURLParam",
]
