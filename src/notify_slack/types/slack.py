"""Slack API parameter types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PostTextParam:
    """Payload for an Incoming Webhook message.

    ``channel``, ``username`` and ``icon_emoji`` are ignored by newer
    Incoming Webhooks but still honoured by legacy ones.
    """

    text: str = ""
    channel: str = ""
    username: str = ""
    icon_emoji: str = ""

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the webhook; empty optional fields are omitted."""
        payload: dict[str, Any] = {"text": self.text}
        if self.channel:
            payload["channel"] = self.channel
        if self.username:
            payload["username"] = self.username
        if self.icon_emoji:
            payload["icon_emoji"] = self.icon_emoji
        return payload


@dataclass(frozen=True, slots=True)
class PostFileParam:
    """Parameters for uploading a file or snippet."""

    filename: str
    channel_id: str = ""
    snippet_type: str = ""


@dataclass(frozen=True, slots=True)
class UploadURLParam:
    """Parameters for files.getUploadURLExternal."""

    filename: str
    length: int
    snippet_type: str = ""
