"""Callback identity resolution.

Every registered callback is reduced to one of three shapes, each of which
carries exactly what is needed to derive a stable string id:

* ``FunctionRef``: a named function, identified by its dotted import name.
* ``InstanceMethodRef``: something bound to one specific object instance,
  identified by an instance marker plus the method name.
* ``TypeMethodRef``: a method reached through a type,
  ``"module.TypeName::method"``.

Registering two callbacks that resolve to the same id at the same hook and
priority overwrites the first registration.
"""

from __future__ import annotations

import inspect
import itertools
import logging
import pkgutil
import threading
import types
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from hookrelay.errors import InvalidCallbackError

logger = logging.getLogger(__name__)

IdentityStrategy = Literal["object_id", "sequence"]

MARKER_ATTR = "__hookrelay_id__"

_marker_counter = itertools.count(1)
_marker_lock = threading.Lock()


@dataclass(frozen=True)
class FunctionRef:
    name: str

    @property
    def id(self) -> str:
        return self.name


@dataclass(frozen=True)
class InstanceMethodRef:
    token: str
    method: str

    @property
    def id(self) -> str:
        return f"{self.token}->{self.method}"


@dataclass(frozen=True)
class TypeMethodRef:
    type_name: str
    method: str

    @property
    def id(self) -> str:
        return f"{self.type_name}::{self.method}"


CallbackRef = FunctionRef | InstanceMethodRef | TypeMethodRef


def instance_token(obj: Any, hook: str, priority: int, strategy: IdentityStrategy = "object_id") -> str:
    """Return the identity marker for one object instance.

    With the ``sequence`` strategy the marker is assigned on first sight and
    stored on the instance. Objects without a writable ``__dict__`` fall back
    to the ``object_id`` token.
    """
    type_name = type(obj).__qualname__
    if strategy == "sequence":
        state = getattr(obj, "__dict__", None)
        if isinstance(state, dict):
            with _marker_lock:
                marker = state.get(MARKER_ATTR)
                if marker is None:
                    marker = f"{type_name}#{next(_marker_counter)}"
                    state[MARKER_ATTR] = marker
                    logger.debug("Assigned marker %s (first seen at hook=%s priority=%s)", marker, hook, priority)
            return marker
    return f"{type_name}@{id(obj):#x}"


def _dotted_name(func: Any) -> str:
    module = getattr(func, "__module__", None)
    qualname = getattr(func, "__qualname__", None) or func.__name__
    if module:
        return f"{module}.{qualname}"
    return qualname


def _resolve_path(path: str) -> Any:
    try:
        target = pkgutil.resolve_name(path)
    except (ImportError, AttributeError, ValueError) as exc:
        raise InvalidCallbackError(path, f"cannot import {path!r} ({exc})") from exc
    if not callable(target):
        raise InvalidCallbackError(path, f"{path!r} does not name a callable")
    return target


def _type_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _resolve_pair(pair: tuple[Any, ...] | list[Any]) -> Callable[..., Any]:
    """Look up the attribute a ``(target, "method")`` pair names.

    The attribute is then identified exactly like the same attribute passed
    directly, so ``(Sub, "run")`` and ``Sub.run`` share one id.
    """
    if len(pair) != 2 or not isinstance(pair[1], str) or not pair[1]:
        raise InvalidCallbackError(pair, "pairs must be (object or type, method name)")
    target, method = pair
    bound = getattr(target, method, None)
    if not callable(bound):
        raise InvalidCallbackError(pair, f"{method!r} is not a callable attribute of {target!r}")
    return bound


def _resolve_callable(callback: Callable[..., Any], hook: str, priority: int, strategy: IdentityStrategy) -> CallbackRef:
    if inspect.ismethod(callback):
        owner = callback.__self__
        if isinstance(owner, type):
            return TypeMethodRef(_type_name(owner), callback.__name__)
        return InstanceMethodRef(instance_token(owner, hook, priority, strategy), callback.__name__)

    if inspect.isbuiltin(callback) or isinstance(callback, types.MethodWrapperType):
        owner = callback.__self__
        if owner is None or inspect.ismodule(owner):
            return FunctionRef(_dotted_name(callback))
        if isinstance(owner, type):
            return TypeMethodRef(_type_name(owner), callback.__name__)
        return InstanceMethodRef(instance_token(owner, hook, priority, strategy), callback.__name__)

    if inspect.isfunction(callback):
        qualname = callback.__qualname__
        # Lambdas and nested functions ("<lambda>", "<locals>") have no importable name.
        if "<" not in qualname:
            if "." in qualname:
                class_path, _, method = qualname.rpartition(".")
                return TypeMethodRef(f"{callback.__module__}.{class_path}", method)
            return FunctionRef(_dotted_name(callback))

    return InstanceMethodRef(instance_token(callback, hook, priority, strategy), "__call__")


def resolve_callback(
    callback: Any,
    hook: str,
    priority: int,
    *,
    strategy: IdentityStrategy = "object_id",
) -> tuple[Callable[..., Any], CallbackRef]:
    """Normalize ``callback`` into an invocable and its identity.

    Accepted shapes are callables, dotted import paths such as
    ``"package.module.function"`` and ``(target, "method")`` pairs.
    """
    if isinstance(callback, str):
        callback = _resolve_path(callback)
    elif isinstance(callback, (tuple, list)):
        callback = _resolve_pair(callback)

    if not callable(callback):
        raise InvalidCallbackError(callback)
    return callback, _resolve_callable(callback, hook, priority, strategy)


def resolve_id(callback: Any, hook: str, priority: int, *, strategy: IdentityStrategy = "object_id") -> str:
    return resolve_callback(callback, hook, priority, strategy=strategy)[1].id
