"""Priority-ordered hook registry with action and filter dispatch."""

from .config import RegistryConfig, load_registry_config
from .errors import HookRelayError, InvalidCallbackError
from .identity import CallbackRef, FunctionRef, InstanceMethodRef, TypeMethodRef, resolve_callback, resolve_id
from .registry import HookRegistry
from .store import CallbackEntry

__all__ = [
    "CallbackEntry",
    "CallbackRef",
    "FunctionRef",
    "HookRegistry",
    "HookRelayError",
    "InstanceMethodRef",
    "InvalidCallbackError",
    "RegistryConfig",
    "TypeMethodRef",
    "load_registry_config",
    "resolve_callback",
    "resolve_id",
]
