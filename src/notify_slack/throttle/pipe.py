"""In-process pipe whose read side can be closed to unblock a pending read.

Mirrors an OS pipe: the writer pushes bytes, the reader pulls lines and blocks
while nothing is available. Closing the *read* side with an error wakes a
blocked ``readline`` immediately, which is how the scheduler stops a reader
that is waiting on input that never comes.
"""

from __future__ import annotations

import threading


class ClosedPipeError(OSError):
    """Read or write on a closed pipe."""

    def __init__(self, message: str = "io: read/write on closed pipe") -> None:
        super().__init__(message)


class _PipeState:
    def __init__(self) -> None:
        self.data = bytearray()
        self.cond = threading.Condition()
        self.write_closed = False
        self.read_error: BaseException | None = None


class PipeReader:
    """Read half of a pipe."""

    def __init__(self, state: _PipeState) -> None:
        self._state = state

    def readline(self) -> bytes:
        """Return the next line including its terminator.

        At end of stream an unterminated tail is returned first, then ``b""``.
        Raises the close error once the read side has been closed.
        """
        st = self._state
        with st.cond:
            while True:
                if st.read_error is not None:
                    raise st.read_error
                idx = st.data.find(b"\n")
                if idx >= 0:
                    line = bytes(st.data[: idx + 1])
                    del st.data[: idx + 1]
                    return line
                if st.write_closed:
                    line = bytes(st.data)
                    st.data.clear()
                    return line
                st.cond.wait()

    def close_with_error(self, exc: BaseException | None = None) -> None:
        """Close the read side; current and future reads raise *exc*."""
        st = self._state
        with st.cond:
            if st.read_error is None:
                st.read_error = exc if exc is not None else ClosedPipeError()
            st.cond.notify_all()

    def close(self) -> None:
        self.close_with_error(None)


class PipeWriter:
    """Write half of a pipe."""

    def __init__(self, state: _PipeState) -> None:
        self._state = state

    def write(self, data: bytes) -> int:
        st = self._state
        with st.cond:
            if st.write_closed or st.read_error is not None:
                raise ClosedPipeError()
            st.data += data
            st.cond.notify_all()
        return len(data)

    def close(self) -> None:
        """Signal end of stream to the reader."""
        st = self._state
        with st.cond:
            st.write_closed = True
            st.cond.notify_all()


def pipe() -> tuple[PipeReader, PipeWriter]:
    """Create a connected (reader, writer) pair."""
    state = _PipeState()
    return PipeReader(state), PipeWriter(state)
