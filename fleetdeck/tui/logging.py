"""Logging setup for the terminal client.

Textual owns the terminal, so every structlog logger (service modules and
TUI events alike) writes JSON lines to a rotating file instead of stderr.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

import structlog

from ..config.settings import settings

DEFAULT_LOG_FILE = "logs/fleetdeck-events.log"
MAX_LOG_BYTES = 5 * 1024 * 1024
BACKUP_LOG_FILES = 5
_ROOT_LOGGER = "fleetdeck"
_EVENTS_LOGGER = "fleetdeck.tui.events"

_configured_path: Optional[Path] = None


def resolve_log_path(configured_path: Optional[str] = None) -> Path:
    configured_path = configured_path or settings.logging.file_path
    if configured_path:
        return Path(configured_path).expanduser()
    project_root = Path(__file__).resolve().parents[2]
    return project_root / DEFAULT_LOG_FILE


def configure_logging(*, level: Optional[str] = None, log_path: Optional[str] = None) -> Path:
    """Attach the rotating JSON file handler and configure structlog once."""
    global _configured_path
    if _configured_path is not None:
        return _configured_path

    path = resolve_log_path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=BACKUP_LOG_FILES,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger(_ROOT_LOGGER)
    root.addHandler(handler)
    root.setLevel(getattr(logging, (level or settings.logging.level).upper(), logging.INFO))
    root.propagate = False

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured_path = path
    return path


_events = structlog.get_logger(_EVENTS_LOGGER)


def log_tui_event(event: str, **payload: Any) -> None:
    """Emit a structured TUI event (navigation, palette, live channel)."""
    _events.info(event, **payload)
