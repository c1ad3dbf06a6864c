"""Unified logging configuration for all entrypoints.

Provides consistent logging across create_catalog.py, precompute_lightness.py,
search_separation.py and measure_y_range.py:
    - Console and file handlers (file handler with optional rotation)
    - JSON output mode for post-processing long search runs
    - Contextual fields (app, distance, seed)
    - Warning capture (Python warnings → logging)
    - Uncaught exception logging

Public API:
    setup_logging(**cfg.logging.model_dump(), context={"app": "search"})
    get_logger(name)
    push_context(distance=572)
    pop_context(keys=["distance"])
    install_excepthook()

Format examples:
    Human: 2025-10-28T13:45:12.345Z | INFO     | app=search distance=572 | Message
    JSON: {"t":"2025-10-28T13:45:12.345000+00:00","lvl":"INFO","distance":572,"msg":"..."}

Context uses contextvars.
Idempotent: repeated setup_logging() calls don't duplicate handlers.
"""

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


_context_var = contextvars.ContextVar('logging_context', default={})

# Handlers installed by setup_logging (removed on reconfiguration)
_installed_handlers: List[logging.Handler] = []


class ContextFormatter(logging.Formatter):
    """Formatter that appends contextual fields to every record.

    Supports:
        - Human-readable format with colors (optional)
        - JSON lines for machine ingestion
        - Contextual fields from push_context()
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m',
    }

    def __init__(
        self,
        fmt_mode: str = "human",
        use_color: bool = True,
        tz: str = "UTC"
    ):
        super().__init__()
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.tz = tz

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get({})

        if self.tz == "UTC":
            ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        else:
            ts = datetime.fromtimestamp(record.created)

        if self.fmt_mode == "json":
            return self._format_json(record, ts, context)
        return self._format_human(record, ts, context)

    def _format_json(self, record: logging.LogRecord, ts: datetime, context: dict) -> str:
        log_dict = {
            't': ts.isoformat(),
            'lvl': record.levelname,
            'name': record.name,
            'pid': os.getpid(),
            'msg': record.getMessage(),
        }
        log_dict.update(context)

        if record.exc_info:
            log_dict['exc'] = self.formatException(record.exc_info)

        return json.dumps(log_dict, default=str)

    def _format_human(self, record: logging.LogRecord, ts: datetime, context: dict) -> str:
        ts_str = ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'

        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.COLORS['RESET']}"

        parts = [ts_str, '|', level, '|']
        context_str = ' '.join(f"{k}={v}" for k, v in context.items())
        if context_str:
            parts.extend([context_str, '|'])
        parts.append(record.getMessage())

        line = ' '.join(parts)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate_max_bytes: Optional[int] = None,
    backup_count: int = 5,
    tz: str = "UTC",
    capture_warnings: bool = True,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure root logger (idempotent).

    Parameters
    ----------
    level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
    file : str, optional
        Log file path; None for no file logging
    json : bool
        Write the file handler as JSON lines, default False
    color : bool
        Use ANSI colors in console output, default True
    to_stderr : bool
        Log to stderr (console), default True
    rotate_max_bytes : int, optional
        Rotate the log file at this size; None disables rotation
    backup_count : int
        Rotated files to keep, default 5
    tz : str
        Timezone for timestamps, "UTC" (default) or "local"
    capture_warnings : bool
        Capture Python warnings to logging, default True
    context : dict, optional
        Initial contextual fields (e.g., {"app": "search"})

    Returns
    -------
    List[logging.Handler]
        Handlers installed on the root logger

    Examples
    --------
    >>> setup_logging(level="INFO", file="outputs/logs/search.log",
    ...               rotate_max_bytes=50_000_000, context={"app": "search"})
    """
    root = logging.getLogger()

    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    root.setLevel(getattr(logging, level.upper()))

    if to_stderr:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ContextFormatter("human", color, tz))
        _installed_handlers.append(console_handler)

    if file:
        _installed_handlers.append(
            _create_file_handler(file, rotate_max_bytes, backup_count, json, tz)
        )

    for handler in _installed_handlers:
        root.addHandler(handler)

    if context:
        push_context(**context)

    if capture_warnings:
        logging.captureWarnings(True)
        logging.getLogger('py.warnings').setLevel(logging.WARNING)

    return list(_installed_handlers)


def setup_logging_from_config(
    logging_cfg: Any,
    context: Optional[Dict[str, Any]] = None
) -> List[logging.Handler]:
    """Configure logging from a validated ``LoggingConfig`` section."""
    return setup_logging(
        level=logging_cfg.level,
        file=logging_cfg.file,
        json=logging_cfg.json_format,
        color=logging_cfg.color,
        rotate_max_bytes=logging_cfg.rotate_max_bytes,
        context=context,
    )


def _create_file_handler(
    log_file: str,
    rotate_max_bytes: Optional[int],
    backup_count: int,
    json_format: bool,
    tz: str
) -> logging.Handler:
    """Create file handler with optional size-based rotation."""
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if rotate_max_bytes:
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=rotate_max_bytes,
            backupCount=backup_count
        )
    else:
        handler = logging.FileHandler(log_file)

    fmt_mode = "json" if json_format else "human"
    handler.setFormatter(ContextFormatter(fmt_mode, use_color=False, tz=tz))
    return handler


def get_logger(name: str) -> logging.Logger:
    """Get logger by name (typically ``__name__``)."""
    return logging.getLogger(name)


def push_context(**kwargs) -> None:
    """Add contextual fields to all subsequent log records.

    Examples
    --------
    >>> push_context(app="search", seed=42)
    >>> logger.info("Started")  # → "... | app=search seed=42 | Started"
    >>> push_context(distance=572)
    >>> logger.info("Escalated")  # → "... | app=search seed=42 distance=572 | ..."
    """
    current = _context_var.get({})
    _context_var.set({**current, **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove contextual fields; all of them when ``keys`` is None."""
    if keys is None:
        _context_var.set({})
        return
    current = dict(_context_var.get({}))
    for key in keys:
        current.pop(key, None)
    _context_var.set(current)


def get_context() -> Dict[str, Any]:
    """Current contextual fields (copy)."""
    return dict(_context_var.get({}))


def install_excepthook() -> None:
    """Log uncaught exceptions (with traceback) before the interpreter exits.

    KeyboardInterrupt is passed to the default hook untouched so an
    interrupted search exits quietly.
    """
    def log_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logging.getLogger(__name__).critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = log_exception
