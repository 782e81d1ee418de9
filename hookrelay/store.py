"""Priority-indexed callback storage with a lazy sort cache."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from hookrelay.identity import CallbackRef


@dataclass(frozen=True)
class CallbackEntry:
    callback: Callable[..., Any]
    accepted_args: int
    ref: CallbackRef

    @property
    def id(self) -> str:
        return self.ref.id


class HookStore:
    """hook -> priority -> callback id -> entry.

    A hook key only exists while it holds at least one non-empty priority
    block. Not thread-safe on its own; ``HookRegistry`` serializes access.
    """

    def __init__(self) -> None:
        self._blocks: dict[str, dict[int, dict[str, CallbackEntry]]] = {}
        self._sorted: set[str] = set()

    def put(self, hook: str, priority: int, entry: CallbackEntry) -> bool:
        """Write ``entry``; returns True when it replaced an existing entry.

        A replaced entry keeps its position within the priority block.
        """
        block = self._blocks.setdefault(hook, {}).setdefault(priority, {})
        replaced = entry.id in block
        block[entry.id] = entry
        self._sorted.discard(hook)
        return replaced

    def delete(self, hook: str, priority: int, callback_id: str) -> bool:
        block = self._blocks.get(hook, {}).get(priority)
        if block is None or callback_id not in block:
            return False
        del block[callback_id]
        if not block:
            del self._blocks[hook][priority]
            if not self._blocks[hook]:
                del self._blocks[hook]
        self._sorted.discard(hook)
        return True

    def drop_hook(self, hook: str) -> bool:
        if hook not in self._blocks:
            return False
        del self._blocks[hook]
        self._sorted.discard(hook)
        return True

    def drop_block(self, hook: str, priority: int) -> bool:
        blocks = self._blocks.get(hook)
        if not blocks or priority not in blocks:
            return False
        del blocks[priority]
        if not blocks:
            del self._blocks[hook]
        self._sorted.discard(hook)
        return True

    def has_hook(self, hook: str) -> bool:
        return bool(self._blocks.get(hook))

    def is_sorted(self, hook: str) -> bool:
        return hook in self._sorted

    def sort_if_needed(self, hook: str) -> None:
        if hook in self._sorted or hook not in self._blocks:
            return
        self._blocks[hook] = dict(sorted(self._blocks[hook].items()))
        self._sorted.add(hook)

    def find_priority(self, hook: str, callback_id: str) -> int | None:
        """First (lowest) priority whose block holds ``callback_id``."""
        self.sort_if_needed(hook)
        for priority, block in self._blocks.get(hook, {}).items():
            if callback_id in block:
                return priority
        return None

    def snapshot(self, hook: str) -> list[CallbackEntry]:
        """Entries in dispatch order: ascending priority, then insertion order."""
        self.sort_if_needed(hook)
        return [entry for block in self._blocks.get(hook, {}).values() for entry in block.values()]

    def view(self, hook: str | None = None) -> Mapping[Any, Any]:
        """Read-only copy of the whole registry, or of one hook's priority map."""
        if hook is not None:
            return self._hook_view(hook)
        return MappingProxyType({name: self._hook_view(name) for name in self._blocks})

    def _hook_view(self, hook: str) -> Mapping[int, Mapping[str, CallbackEntry]]:
        blocks = self._blocks.get(hook, {})
        return MappingProxyType(
            {priority: MappingProxyType(dict(blocks[priority])) for priority in sorted(blocks)}
        )
