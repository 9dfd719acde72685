"""Test fixtures: a hand-driven ticker, a recording sink and an in-process pipe."""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from notify_slack.throttle.pipe import PipeReader, PipeWriter, pipe


class ManualTicker:
    """Interval source that only ticks when the test says so.

    Usage:
        ticks = ManualTicker()
        task = asyncio.create_task(ex.run(cancel, ticks, sink.flush, sink.final))
        ticks.tick()
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[float] = asyncio.Queue()

    def tick(self) -> None:
        self._queue.put_nowait(time.monotonic())

    def __aiter__(self) -> ManualTicker:
        return self

    async def __anext__(self) -> float:
        return await self._queue.get()


class RecordingSink:
    """Flush/final callbacks that remember what they were given."""

    def __init__(self, flush_error: Exception | None = None) -> None:
        self.flushes: list[str] = []
        self.finals: list[str] = []
        self._flush_error = flush_error
        self._flushed: asyncio.Queue[str] = asyncio.Queue()
        self._finished: asyncio.Queue[str] = asyncio.Queue()

    async def flush(self, text: str) -> None:
        self.flushes.append(text)
        self._flushed.put_nowait(text)
        if self._flush_error is not None:
            raise self._flush_error

    async def final(self, text: str) -> None:
        self.finals.append(text)
        self._finished.put_nowait(text)

    async def next_flush(self, timeout: float = 2.0) -> str:
        return await asyncio.wait_for(self._flushed.get(), timeout)

    async def next_final(self, timeout: float = 2.0) -> str:
        return await asyncio.wait_for(self._finished.get(), timeout)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll *predicate* until it holds; the reader runs on its own thread."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def ticks() -> ManualTicker:
    return ManualTicker()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def pipe_pair() -> Iterator[tuple[PipeReader, PipeWriter]]:
    reader, writer = pipe()
    yield reader, writer
    reader.close()
    writer.close()


@pytest.fixture
def fake_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point Path.home() at an empty directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    return home


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every NOTIFY_SLACK_* variable from the environment."""
    for key in list(os.environ):
        if key.startswith("NOTIFY_SLACK_"):
            monkeypatch.delenv(key)
