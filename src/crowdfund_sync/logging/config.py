# -*- coding: utf-8 -*-
"""structlog setup for the sync service: stdlib handlers, optional Logfire sink."""

from __future__ import annotations

import logging
import logfire
import structlog
from typing import Any
from structlog.types import EventDict, Processor
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from crowdfund_sync.config import Settings, get_settings
from crowdfund_sync.config.config import AppSettings, LoggingSettings
from crowdfund_sync.utils.validation import mask_address

_LOGFIRE_LEVELS: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "fatal",
}

# Wallet-bearing keys: contributor_address, creator_address, initiator, ...
_WALLET_KEYS = frozenset({"initiator", "contributor", "creator"})
_WALLET_SUFFIXES = ("_address", "_wallet")


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def mask_wallet_fields(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace full wallet addresses with their masked form before rendering."""
    for key, value in event_dict.items():
        if not isinstance(value, str):
            continue
        if key in _WALLET_KEYS or key.endswith(_WALLET_SUFFIXES):
            event_dict[key] = mask_address(value)
    return event_dict


def service_context(app: AppSettings) -> Processor:
    """Processor stamping logger name and service identity on every event."""
    identity: dict[str, Any] = {"app_name": app.app_name, "environment": app.environment}
    if app.service_name:
        identity["service_name"] = app.service_name
    if app.service_version:
        identity["service_version"] = app.service_version

    def _stamp(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        stdlib_logger = getattr(logger, "_logger", None)
        event_dict.setdefault(
            "logger", getattr(stdlib_logger, "name", None) or getattr(logger, "name", "") or ""
        )
        event_dict.update(identity)
        return event_dict

    return _stamp


def _console_handler(cfg: LoggingSettings) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(_level(cfg.console_level))
    return handler


def _file_handler(cfg: LoggingSettings) -> logging.Handler:
    path = Path(cfg.log_file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        path,
        when=cfg.log_file_when,
        interval=cfg.log_file_interval,
        backupCount=cfg.log_file_backup_count,
        encoding="utf-8",
        utc=cfg.log_file_utc,
    )
    handler.setLevel(_level(cfg.file_level))
    return handler


def build_handlers(cfg: LoggingSettings) -> list[logging.Handler]:
    """stdlib handlers for the enabled outputs; structlog renders the message text."""
    handlers: list[logging.Handler] = []
    if cfg.log_to_console:
        handlers.append(_console_handler(cfg))
    if cfg.log_to_file:
        handlers.append(_file_handler(cfg))
    for handler in handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
    return handlers


def build_processors(settings: Settings, *, render: bool = True) -> list[Processor]:
    """Processor chain: context, masking, optional Logfire, then one renderer.

    The renderer is JSON whenever a log file is written or json_format is set,
    otherwise the coloured console renderer.
    """
    cfg = settings.logging
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        service_context(settings.app),
        mask_wallet_fields,
    ]
    if cfg.logfire_enabled:
        processors.append(logfire.StructlogProcessor())  # type: ignore[arg-type]
    if render:
        if cfg.log_to_file or cfg.json_format:
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog (and Logfire when enabled) from settings."""
    settings = settings or get_settings()
    cfg = settings.logging

    handlers = build_handlers(cfg)
    if handlers:
        logging.basicConfig(level=min(h.level for h in handlers), handlers=handlers, force=True)

    if cfg.logfire_enabled:
        app = settings.app
        logfire.configure(
            token=cfg.logfire_token,
            service_name=app.service_name or app.app_name,
            service_version=app.service_version,
            min_level=_LOGFIRE_LEVELS.get(cfg.logfire_level, "info"),  # type: ignore[arg-type]
            environment=app.environment,
        )

    structlog.configure(
        processors=build_processors(settings, render=bool(handlers)),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
