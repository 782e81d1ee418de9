"""Dispatch call stack and per-hook call counters."""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager


class CallStack:
    """Hooks currently being dispatched, tracked separately for each thread."""

    def __init__(self) -> None:
        self._local = threading.local()

    def _frames(self) -> list[str]:
        frames = getattr(self._local, "frames", None)
        if frames is None:
            frames = []
            self._local.frames = frames
        return frames

    def push(self, hook: str) -> None:
        self._frames().append(hook)

    def pop(self) -> str | None:
        frames = self._frames()
        return frames.pop() if frames else None

    def current(self) -> str | None:
        frames = self._frames()
        return frames[-1] if frames else None

    def depth(self) -> int:
        return len(self._frames())

    @contextmanager
    def frame(self, hook: str) -> Iterator[None]:
        """Push ``hook`` for the duration of the block, popping it on any exit."""
        self.push(hook)
        try:
            yield
        finally:
            self.pop()


class CallCounter:
    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()

    def increment(self, hook: str) -> int:
        self._counts[hook] += 1
        return self._counts[hook]

    def get(self, hook: str) -> int:
        return self._counts.get(hook, 0)
