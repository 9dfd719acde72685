"""Configuration types for notify_slack."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_INTERVAL = 1.0  # seconds


@dataclass(slots=True)
class Config:
    """Resolved settings for a single invocation.

    Loaders only fill fields that are still empty, so whichever source runs
    first wins (flags, then TOML, then environment).
    """

    slack_url: str = ""
    token: str = ""
    channel: str = ""
    channel_id: str = ""  # for uploading a file
    username: str = ""
    icon_emoji: str = ""
    interval: float | None = None  # seconds; None until some source sets it

    @property
    def duration(self) -> float:
        """Flush interval in seconds, falling back to the default."""
        if self.interval is None:
            return DEFAULT_INTERVAL
        return self.interval
