"""Pipe command output into Slack.

Usage:
    import asyncio
    from notify_slack import Exec, ticker

    async def main(source, post):
        cancel = asyncio.Event()
        await Exec(source).run(cancel, ticker(1.0), post, post)
"""

__version__ = "0.5.0"

from notify_slack.slack.client import SlackClient, SlackError
from notify_slack.throttle.buffer import LineBuffer
from notify_slack.throttle.exec import Exec, InputCancelledError, ReadError, ticker
from notify_slack.throttle.pipe import ClosedPipeError, pipe
from notify_slack.types.config import Config
from notify_slack.types.slack import PostFileParam, PostTextParam, UploadURLParam

__all__ = [
    "__version__",
    # Batching
    "Exec",
    "LineBuffer",
    "ticker",
    "pipe",
    # Errors
    "ClosedPipeError",
    "InputCancelledError",
    "ReadError",
    "SlackError",
    # Slack
    "SlackClient",
    "PostFileParam",
    "PostTextParam",
    "UploadURLParam",
    # Configuration
    "Config",
]
