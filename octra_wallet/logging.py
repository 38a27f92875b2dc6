from __future__ import annotations

"""
Structured logging setup for the wallet.

This module configures **structlog** + the stdlib ``logging`` package so that:
- Library modules keep logging through ``logging.getLogger(__name__)`` with
  %-style messages; those records go through the same processor chain as
  structlog events.
- Secrets bound as event keys (``priv``, ``private_key``, ``seed``, ...) are
  masked before rendering.
- Output is a console renderer for the CLI and JSON for the relay.

Quick start
-----------
    from octra_wallet.logging import setup_logging, get_logger

    setup_logging(level="INFO", log_format="console")  # once per process
    log = get_logger(__name__)
    log.info("balance_fetched", address=addr)
"""

import logging
from typing import Any, Dict, Iterable, Optional

import structlog
from structlog.contextvars import merge_contextvars

# ------------------------------ Redaction ------------------------------------


REDACT_KEYS = {"priv", "private_key", "seed", "secret", "authorization", "password"}


def _redact_secrets(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Processor that masks values stored under well-known secret keys."""
    for k in list(event_dict.keys()):
        if k.lower() in REDACT_KEYS and event_dict[k] is not None:
            event_dict[k] = "***"
    return event_dict


# ------------------------------ Setup ----------------------------------------


def _shared_processors(service_name: str, include_stacktrace: bool) -> Iterable:
    yield merge_contextvars
    yield structlog.stdlib.add_log_level
    yield structlog.stdlib.add_logger_name
    yield structlog.processors.TimeStamper(fmt="iso", utc=True)
    yield structlog.processors.StackInfoRenderer()
    if include_stacktrace:
        yield structlog.processors.format_exc_info
    yield _redact_secrets
    yield structlog.processors.UnicodeDecoder()

    def _ensure_service(_: Any, __: str, ev: Dict[str, Any]) -> Dict[str, Any]:
        ev.setdefault("service", service_name)
        return ev

    yield _ensure_service


def setup_logging(
    *,
    service_name: str = "octra-wallet",
    level: str | int = "INFO",
    log_format: str = "console",
    include_stacktrace: Optional[bool] = None,
) -> None:
    """
    Configure structlog + stdlib logging. Safe to call more than once; the
    root handler is replaced, not duplicated.

    `log_format` is "console" or "json". Stack traces default to on for
    JSON and off for the console renderer.
    """
    log_format = log_format.lower()
    if isinstance(level, str):
        level = level.upper()
    if include_stacktrace is None:
        include_stacktrace = log_format == "json"

    processors = list(_shared_processors(service_name, include_stacktrace))
    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False, sort_keys=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.handlers = [handler]
        lg.propagate = False
        lg.setLevel(level)

    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger; bind module name if provided."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


__all__ = [
    "REDACT_KEYS",
    "setup_logging",
    "get_logger",
]
