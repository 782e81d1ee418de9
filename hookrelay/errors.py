"""Exception types raised by hookrelay."""

from __future__ import annotations


class HookRelayError(Exception):
    """Base class for hookrelay errors."""


class InvalidCallbackError(HookRelayError, TypeError):
    """Raised when a callback is not a recognized invocable shape."""

    def __init__(self, callback: object, reason: str = "must be a callable, a dotted path, or a (target, method) pair") -> None:
        self.callback = callback
        super().__init__(f"Invalid callback {callback!r}: {reason}")
