"""Structured logging for Asset Import Hub.

Every module logs through structlog with dotted event names
(``column_mapper.run_complete``, ``import.records_built``). Events are
rendered as one JSON object per line on stderr, so command output on stdout
stays machine-readable. A daily rotating file can be added through settings:

- ``LOG_LEVEL``: DEBUG, INFO, WARNING, ERROR or CRITICAL (default INFO)
- ``AIH_LOG_TO_FILE``: write a copy of every event to a file
- ``AIH_LOG_FILE_DIR``: directory for those files (default ``logs``)

Usage:
    >>> from asset_import_hub.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("column_mapper.run_complete", document_type="asset", mapped=12)
"""

import logging
import os
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from structlog.types import EventDict, Processor

from asset_import_hub.config import get_settings

# Key fragments whose values never reach a log line
SENSITIVE_KEY_FRAGMENTS = ("password", "token", "api_key", "secret", "credential")

REDACTED_VALUE = "[REDACTED]"

_HANDLER_MARKER = "_asset_import_hub_handler"


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(fragment in lowered for fragment in SENSITIVE_KEY_FRAGMENTS)


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return sanitize_for_logging(value)
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(item) for item in value)
    return value


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` with sensitive values replaced.

    Keys are matched case-insensitively on a substring, so ``db_password`` and
    ``ACCESS_TOKEN`` are both redacted. Dictionaries nested inside values or
    inside lists are handled the same way.

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "admin"})
        {'password': '[REDACTED]', 'user': 'admin'}
    """
    return {
        key: REDACTED_VALUE if _is_sensitive(key) else _redact(value)
        for key, value in data.items()
    }


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    return sanitize_for_logging(dict(event_dict))


def _resolve_level(level: Optional[str]) -> int:
    if level is None:
        try:
            level = get_settings().LOG_LEVEL
        except Exception:
            # Broken settings must still leave a usable logger
            level = os.getenv("LOG_LEVEL", "INFO")
    return getattr(logging, level.upper(), logging.INFO)


def _log_file_path(log_dir: Path) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"assetimporthub-{datetime.now():%Y%m%d}.log"


def _build_handlers(level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    try:
        settings = get_settings()
        log_to_file, log_dir = settings.log_to_file, Path(settings.log_file_dir)
    except Exception:
        log_to_file, log_dir = False, Path("logs")

    if log_to_file:
        handlers.append(
            TimedRotatingFileHandler(
                filename=str(_log_file_path(log_dir)),
                when="midnight",
                backupCount=30,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setLevel(level)
        setattr(handler, _HANDLER_MARKER, True)
    return handlers


def configure_logging(level: Optional[str] = None) -> None:
    """(Re)configure stdlib handlers and the structlog processor chain.

    Runs once on import. Calling it again replaces the handlers installed by
    a previous call, which lets the CLI switch to DEBUG for ``--verbose``.
    """
    numeric_level = _resolve_level(level)
    root = logging.getLogger()

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()
    for handler in _build_handlers(numeric_level):
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(numeric_level)

    processors: List[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(default=str),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str) -> Any:
    """Get a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Create a logger with fields attached to every event it emits.

    Example:
        >>> logger = bind_context(document_type="asset", source_file="units.xlsx")
        >>> logger.info("import.records_built", record_count=120)
    """
    return structlog.get_logger().bind(**kwargs)
