"""Hook registry with priority-ordered action and filter dispatch."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

from hookrelay.config import RegistryConfig, load_registry_config
from hookrelay.identity import CallbackRef, resolve_callback
from hookrelay.stack import CallCounter, CallStack
from hookrelay.store import CallbackEntry, HookStore

logger = logging.getLogger(__name__)

Decorator = Callable[[Callable[..., Any]], Callable[..., Any]]


def _check_priority(priority: Any) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise TypeError(f"priority must be an int, got {priority!r}")
    return priority


def _check_accepted_args(accepted_args: Any) -> int:
    if isinstance(accepted_args, bool) or not isinstance(accepted_args, int):
        raise TypeError(f"accepted_args must be an int, got {accepted_args!r}")
    if accepted_args < 0:
        raise ValueError(f"accepted_args must be non-negative, got {accepted_args}")
    return accepted_args


class HookRegistry:
    """Named extension points that callbacks attach to at integer priorities.

    ``call``/``call_array`` run every callback of a hook for its side effects.
    ``apply``/``apply_array`` thread a value through the callbacks and return
    the result. Lower priorities run first; ties run in registration order.

    Dispatching a hook first runs the catch-all hook (``"all"`` by default)
    with the full argument list, hook name first. Dispatching a hook with no
    callbacks does nothing (filters return the value unchanged).

    Dispatching the catch-all hook by name runs its callbacks once, as an
    ordinary hook; it does not also trigger itself as the catch-all. Nested
    dispatches started from catch-all callbacks are not guarded.
    """

    def __init__(self, config: RegistryConfig | None = None) -> None:
        self.config = config or RegistryConfig()
        self._store = HookStore()
        self._stack = CallStack()
        self._counter = CallCounter()
        self._lock = threading.RLock()

    @classmethod
    def from_config(
        cls,
        path: str | Path | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> HookRegistry:
        return cls(load_registry_config(path, overrides))

    def _resolve(self, callback: Any, hook: str, priority: int) -> tuple[Callable[..., Any], CallbackRef]:
        return resolve_callback(callback, hook, priority, strategy=self.config.identity_strategy)

    def _priority(self, priority: int | None) -> int:
        if priority is None:
            return self.config.default_priority
        return _check_priority(priority)

    # -- mutation -------------------------------------------------------

    def add(self, hook: str, callback: Any, priority: int | None = None, accepted_args: int | None = None) -> bool:
        """Register ``callback`` on ``hook``. Always returns True.

        Re-adding a callback with the same identity at the same priority
        overwrites the earlier entry (the new ``accepted_args`` wins).
        """
        priority = self._priority(priority)
        if accepted_args is None:
            accepted_args = self.config.default_accepted_args
        accepted_args = _check_accepted_args(accepted_args)

        with self._lock:
            target, ref = self._resolve(callback, hook, priority)
            replaced = self._store.put(hook, priority, CallbackEntry(target, accepted_args, ref))
        logger.debug(
            "%s %s on hook=%s priority=%s accepted_args=%s",
            "Replaced" if replaced else "Added",
            ref.id,
            hook,
            priority,
            accepted_args,
        )
        return True

    def remove(self, hook: str, callback: Any, priority: int | None = None) -> bool:
        """Remove ``callback`` from one priority block; returns whether it was there."""
        priority = self._priority(priority)
        with self._lock:
            _, ref = self._resolve(callback, hook, priority)
            removed = self._store.delete(hook, priority, ref.id)
        if removed:
            logger.debug("Removed %s from hook=%s priority=%s", ref.id, hook, priority)
        return removed

    def remove_any(self, hook: str, callback: Any) -> bool:
        """Remove ``callback`` from every priority of ``hook``."""
        removed = False
        with self._lock:
            while True:
                priority = self.exists(hook, callback)
                if priority is False:
                    break
                self.remove(hook, callback, priority)
                removed = True
        return removed

    def remove_all(self, hook: str, priority: int | None = None) -> bool:
        """Drop a whole hook, or just one of its priority blocks."""
        with self._lock:
            if priority is None:
                removed = self._store.drop_hook(hook)
            else:
                removed = self._store.drop_block(hook, _check_priority(priority))
        if removed:
            logger.debug("Removed all callbacks from hook=%s priority=%s", hook, "*" if priority is None else priority)
        return removed

    def action(self, hook: str, priority: int | None = None, accepted_args: int | None = None) -> Decorator:
        """Decorator form of ``add``; returns the function unchanged."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.add(hook, func, priority, accepted_args)
            return func

        return decorator

    def filter(self, hook: str, priority: int | None = None, accepted_args: int | None = None) -> Decorator:
        """Decorator form of ``add`` for callbacks dispatched through ``apply``."""
        return self.action(hook, priority, accepted_args)

    # -- dispatch -------------------------------------------------------

    def call(self, hook: str, *args: Any) -> None:
        self.call_array(hook, args)

    def call_array(self, hook: str, args: Sequence[Any]) -> None:
        args = tuple(args)
        with self._stack.frame(hook):
            entries = self._begin_dispatch(hook, (hook, *args))
            if entries is None:
                return
            self._log_dispatch("action", hook, entries)
            self._run_actions(entries, args)

    def apply(self, hook: str, value: Any, *args: Any) -> Any:
        return self.apply_array(hook, value, args)

    def apply_array(self, hook: str, value: Any, args: Sequence[Any]) -> Any:
        extra = tuple(args)
        with self._stack.frame(hook):
            entries = self._begin_dispatch(hook, (hook, value, *extra))
            if entries is None:
                return value
            self._log_dispatch("filter", hook, entries)
            for entry in entries:
                value = entry.callback(*(value, *extra)[: entry.accepted_args])
            return value

    def _begin_dispatch(self, hook: str, full_args: tuple[Any, ...]) -> list[CallbackEntry] | None:
        """Run the catch-all hook, then count and snapshot ``hook``.

        Returns None when ``hook`` has no callbacks.
        """
        catch_all = self.config.catch_all_hook
        if hook != catch_all:
            with self._lock:
                catch_all_entries = self._store.snapshot(catch_all)
            if catch_all_entries:
                self._log_dispatch("catch-all", catch_all, catch_all_entries)
                self._run_actions(catch_all_entries, full_args)

        with self._lock:
            if not self._store.has_hook(hook):
                return None
            self._counter.increment(hook)
            return self._store.snapshot(hook)

    @staticmethod
    def _run_actions(entries: list[CallbackEntry], args: tuple[Any, ...]) -> None:
        for entry in entries:
            entry.callback(*args[: entry.accepted_args])

    def _log_dispatch(self, mode: str, hook: str, entries: list[CallbackEntry]) -> None:
        if self.config.log_dispatch:
            logger.debug(
                "Dispatching %s hook=%s callbacks=%s depth=%s",
                mode,
                hook,
                len(entries),
                self._stack.depth(),
            )

    # -- introspection --------------------------------------------------

    def current(self) -> str | None:
        """The innermost hook being dispatched on this thread, if any."""
        return self._stack.current()

    def did(self, hook: str) -> int:
        with self._lock:
            return self._counter.get(hook)

    def exists(self, hook: str, callback: Any = None) -> bool | int:
        """Whether ``hook`` has callbacks, or the first priority holding ``callback``.

        With a callback this returns an ``int`` priority or ``False``. Priority
        ``0`` is a valid result, so test with ``is False``.
        """
        with self._lock:
            if callback is None:
                return self._store.has_hook(hook)
            _, ref = self._resolve(callback, hook, self.config.default_priority)
            priority = self._store.find_priority(hook, ref.id)
        if priority is None:
            return False
        return priority

    def registered(self, hook: str | None = None) -> Mapping[Any, Any]:
        """Read-only snapshot of the registry, or of one hook's priority blocks."""
        with self._lock:
            return self._store.view(hook)
