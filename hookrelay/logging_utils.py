"""Logging configuration helpers."""

from __future__ import annotations

import logging


def configure_logging(level: str = "INFO", hook_level: str | None = None) -> None:
    """Configure root logging; ``hook_level`` tunes only the ``hookrelay`` loggers.

    Dispatch tracing (``RegistryConfig.log_dispatch``) is emitted at DEBUG, so
    ``configure_logging(hook_level="DEBUG")`` shows it without making every
    other library verbose.
    """
    normalized = level.upper()
    logging.basicConfig(
        level=getattr(logging, normalized, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if hook_level is not None:
        logging.getLogger("hookrelay").setLevel(getattr(logging, hook_level.upper(), logging.INFO))
