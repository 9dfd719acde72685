"""Thread-safe line accumulator shared by the reader thread and the scheduler."""

from __future__ import annotations

import threading


class LineBuffer:
    """Append-only byte buffer with an atomic take-and-clear.

    The reader thread appends, the flush scheduler takes. Both go through the
    same lock so a take never observes half of an append.
    """

    def __init__(self) -> None:
        self._buf = bytearray()
        self._lock = threading.Lock()

    def append(self, line: bytes) -> None:
        """Append *line* followed by a newline."""
        with self._lock:
            self._buf += line
            self._buf += b"\n"

    def take(self) -> str:
        """Return everything buffered so far and reset the buffer."""
        with self._lock:
            data = bytes(self._buf)
            self._buf.clear()
        return data.decode("utf-8", errors="replace")

    def __len__(self) -> int:
        with self._lock:
            return len(self._buf)
