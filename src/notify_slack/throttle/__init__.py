"""Line batching between a blocking input and periodic delivery."""

from notify_slack.throttle.buffer import LineBuffer
from notify_slack.throttle.exec import (
    EXPECTED_READ_ERRORS,
    Exec,
    FlushCallback,
    InputCancelledError,
    LineSource,
    ReadError,
    ticker,
)
from notify_slack.throttle.pipe import ClosedPipeError, PipeReader, PipeWriter, pipe

__all__ = [
    "EXPECTED_READ_ERRORS",
    "ClosedPipeError",
    "Exec",
    "FlushCallback",
    "InputCancelledError",
    "LineBuffer",
    "LineSource",
    "PipeReader",
    "PipeWriter",
    "ReadError",
    "pipe",
    "ticker",
]
