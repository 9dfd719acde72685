"""Standard input as a line source, echoed to standard output."""

from __future__ import annotations

import threading
from typing import BinaryIO

from notify_slack.throttle.pipe import ClosedPipeError


class StdinSource:
    """Reads lines from *stream* and copies each one to *echo* unchanged.

    ``close()`` cannot interrupt a read already blocked in the OS. A line that
    read returns after ``close()`` is still echoed, then ClosedPipeError is
    raised instead of handing it to the caller; nothing is read after that.
    The reader thread is a daemon, so a read that never returns does not keep
    the process alive.
    """

    def __init__(self, stream: BinaryIO, echo: BinaryIO | None = None) -> None:
        self._stream = stream
        self._echo = echo
        self._closed = threading.Event()

    def readline(self) -> bytes:
        if self._closed.is_set():
            raise ClosedPipeError()
        line = self._stream.readline()
        if line and self._echo is not None:
            self._echo.write(line)
            self._echo.flush()
        if self._closed.is_set():
            raise ClosedPipeError()
        return line

    def close(self) -> None:
        self._closed.set()
