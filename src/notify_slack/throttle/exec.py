"""Batch lines from a blocking input and flush them on a timer.

A daemon thread reads the input line by line into a :class:`LineBuffer`.
The coroutine that called :meth:`Exec.run` waits on three events at once:

* a tick from the interval source: hand the buffer to ``flush_callback``
* the cancellation event: close the input, hand the rest to ``done_callback``
* end of input: hand the rest to ``done_callback``

``done_callback`` is awaited exactly once per run, for whichever terminal
event is seen first.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from typing import Any, Protocol

from notify_slack.throttle.buffer import LineBuffer
from notify_slack.throttle.pipe import ClosedPipeError

logger = logging.getLogger(__name__)

FlushCallback = Callable[[str], Awaitable[None]]

_EXHAUSTED = object()


class InputCancelledError(Exception):
    """Raised by the input once the scheduler has been cancelled."""


class ReadError(Exception):
    """Unexpected failure while reading the input."""


class LineSource(Protocol):
    """Blocking line-oriented input. ``b""`` means end of stream."""

    def readline(self) -> bytes: ...


# Errors that mean the input went away rather than broke.
EXPECTED_READ_ERRORS: tuple[type[BaseException], ...] = (
    ClosedPipeError,
    BrokenPipeError,
    EOFError,
    InputCancelledError,
)


def ticker(seconds: float) -> AsyncIterator[float]:
    """Yield the loop time every *seconds*; ticks missed by a slow consumer are dropped."""
    if seconds <= 0:
        raise ValueError("non-positive interval for ticker")
    return _tick(seconds)


async def _tick(seconds: float) -> AsyncIterator[float]:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + seconds
    while True:
        await asyncio.sleep(max(0.0, deadline - loop.time()))
        yield loop.time()
        deadline += seconds
        now = loop.time()
        if deadline <= now:
            deadline += seconds * ((now - deadline) // seconds + 1)


async def _next_tick(ticks: AsyncIterator[Any]) -> Any:
    try:
        return await anext(ticks)
    except StopAsyncIteration:
        return _EXHAUSTED


def _strip_eol(line: bytes) -> bytes:
    if line.endswith(b"\r\n"):
        return line[:-2]
    if line.endswith(b"\n"):
        return line[:-1]
    return line


class Exec:
    """Reads *source* in the background and batches its lines.

    Usage::

        ex = Exec(source)
        await ex.run(cancel, ticker(1.0), flush, done)
    """

    def __init__(self, source: LineSource) -> None:
        self._source = source
        self.buffer = LineBuffer()
        self._thread: threading.Thread | None = None
        self._finished = threading.Event()
        self._read_error: BaseException | None = None

    @property
    def reading(self) -> bool:
        """True while the reader thread is still consuming input."""
        return self._thread is not None and not self._finished.is_set()

    async def run(
        self,
        cancel: asyncio.Event,
        interval: AsyncIterable[Any],
        flush_callback: FlushCallback,
        done_callback: FlushCallback,
    ) -> None:
        """Start the reader thread and process events until input ends or *cancel* is set.

        Raises :class:`ReadError` if the input fails with an unexpected error;
        ``done_callback`` is not called in that case.
        """
        if self._thread is not None:
            raise RuntimeError("Exec.run can only be called once")

        loop = asyncio.get_running_loop()
        completed = asyncio.Event()
        self._thread = threading.Thread(
            target=self._read_input,
            args=(loop, completed),
            name="notify-slack-reader",
            daemon=True,
        )
        self._thread.start()

        await self._process_events(cancel, completed, interval, flush_callback, done_callback)

    # -- Reader thread ----------------------------------------------------

    def _read_input(self, loop: asyncio.AbstractEventLoop, completed: asyncio.Event) -> None:
        try:
            while True:
                try:
                    line = self._source.readline()
                except EXPECTED_READ_ERRORS as exc:
                    logger.debug("input closed: %s", exc)
                    return
                except Exception as exc:
                    self._read_error = exc
                    return
                if not line:
                    return
                self.buffer.append(_strip_eol(line))
        finally:
            self._finished.set()
            try:
                loop.call_soon_threadsafe(completed.set)
            except RuntimeError:
                # Loop already closed; the scheduler has returned.
                pass

    # -- Scheduler --------------------------------------------------------

    async def _process_events(
        self,
        cancel: asyncio.Event,
        completed: asyncio.Event,
        interval: AsyncIterable[Any],
        flush_callback: FlushCallback,
        done_callback: FlushCallback,
    ) -> None:
        ticks = aiter(interval)
        cancelled = asyncio.ensure_future(cancel.wait())
        finished = asyncio.ensure_future(completed.wait())
        tick: asyncio.Future[Any] | None = None
        ticking = True

        try:
            while True:
                if tick is None and ticking:
                    tick = asyncio.ensure_future(_next_tick(ticks))

                waiting: set[asyncio.Future[Any]] = {cancelled, finished}
                if tick is not None:
                    waiting.add(tick)
                ready, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)

                # Terminal events win over a tick that became ready at the same time.
                if cancelled in ready:
                    logger.debug("cancelled; closing input")
                    self._close_input()
                    await self._deliver(done_callback, "done")
                    return

                if finished in ready:
                    if self._read_error is not None:
                        raise ReadError(f"failed to read input: {self._read_error}") from self._read_error
                    logger.debug("input finished")
                    await self._deliver(done_callback, "done")
                    return

                assert tick is not None
                if tick.result() is _EXHAUSTED:
                    ticking = False
                else:
                    await self._deliver(flush_callback, "flush")
                tick = None
        finally:
            pending = [f for f in (cancelled, finished, tick) if f is not None and not f.done()]
            for f in pending:
                f.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            aclose = getattr(ticks, "aclose", None)
            if aclose is not None:
                await aclose()

    async def _deliver(self, callback: FlushCallback, kind: str) -> None:
        output = self.buffer.take()
        try:
            await callback(output)
        except Exception as exc:
            logger.warning("%s callback failed: %s", kind, exc)

    def _close_input(self) -> None:
        """Unblock a reader stuck in ``readline`` by closing the source."""
        close_with_error = getattr(self._source, "close_with_error", None)
        try:
            if close_with_error is not None:
                close_with_error(InputCancelledError("input cancelled"))
                return
            close = getattr(self._source, "close", None)
            if close is not None:
                close()
        except Exception as exc:
            logger.debug("closing input failed: %s", exc)
