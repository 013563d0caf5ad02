"""Logging setup shared by scripts/rasterize.py and ci/golden_tests/compare.py.

Provides:
    - One stderr handler and an optional file handler (plain, size- or
      time-rotated)
    - Line format: human-readable or one JSON object per line for CI ingestion
    - Contextual fields (app, file, vector) attached to every record
    - Python warnings and uncaught exceptions routed into logging

Public API:
    setup_logging(log_level, log_file, json=..., context={"app": "golden"})
    push_context(vector="cw_right_400") / pop_context(keys=["vector"])
    get_context(), get_logger(name), set_level(level)
    install_excepthook(), route_warnings()

The rasterizer modules never configure logging; they only call
logging.getLogger(__name__). Per-sample decisions are never logged.

Format examples:
    Human: 2026-10-18T13:45:12.345Z | INFO     | app=golden vector=cw_right_400 | 210 hits
    JSON:  {"t": "2026-10-18T13:45:12.345000+00:00", "lvl": "INFO", "name": "...",
            "pid": 4242, "app": "golden", "vector": "cw_right_400", "msg": "210 hits"}

Context lives in a contextvars.ContextVar, so threads and asyncio tasks each
see their own fields. Calling setup_logging() again replaces the handlers it
installed before instead of stacking new ones.
"""

import contextvars
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

_context_var: contextvars.ContextVar = contextvars.ContextVar('raster_log_context', default={})

_configured = False

LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """Render records with the current context fields.

    Parameters
    ----------
    fmt_mode : str
        "human" or "json"
    use_color : bool
        Color the level name (only when stderr is a terminal)
    tz : str
        "UTC" or "local"
    """

    def __init__(self, fmt_mode: str = "human", use_color: bool = True, tz: str = "UTC"):
        super().__init__()
        if fmt_mode not in ("human", "json"):
            raise ValueError(f"Unknown format mode: {fmt_mode}. Use 'human' or 'json'.")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.tz = tz

    def _timestamp(self, record: logging.LogRecord) -> datetime:
        tzinfo = timezone.utc if self.tz == "UTC" else None
        return datetime.fromtimestamp(record.created, tz=tzinfo)

    def format(self, record: logging.LogRecord) -> str:
        ts = self._timestamp(record)
        context = _context_var.get()
        message = record.getMessage()
        exc = self.formatException(record.exc_info) if record.exc_info else None

        if self.fmt_mode == "json":
            payload = {
                't': ts.isoformat(),
                'lvl': record.levelname,
                'name': record.name,
                'pid': os.getpid(),
                **context,
                'msg': message,
            }
            if exc:
                payload['exc'] = exc
            return json.dumps(payload, default=str)

        level = f"{record.levelname:<8}"
        if self.use_color and record.levelname in LEVEL_COLORS:
            level = LEVEL_COLORS[record.levelname] + level + RESET

        fields = [ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z', level]
        if context:
            fields.append(' '.join(f"{k}={v}" for k, v in context.items()))
        fields.append(message)
        line = ' | '.join(fields)
        return f"{line}\n{exc}" if exc else line


def _plain_handler(path: str, rotate: Dict[str, Any]) -> logging.Handler:
    return logging.FileHandler(path)


def _size_handler(path: str, rotate: Dict[str, Any]) -> logging.Handler:
    return logging.handlers.RotatingFileHandler(
        path,
        maxBytes=rotate.get('max_bytes', 10_000_000),
        backupCount=rotate.get('backup_count', 5),
    )


def _time_handler(path: str, rotate: Dict[str, Any]) -> logging.Handler:
    return logging.handlers.TimedRotatingFileHandler(
        path,
        when=rotate.get('when', 'D'),
        interval=rotate.get('interval', 1),
        backupCount=rotate.get('backup_count', 7),
    )


FILE_HANDLERS: Dict[str, Callable[[str, Dict[str, Any]], logging.Handler]] = {
    'size': _size_handler,
    'time': _time_handler,
}


def _file_handler(
    log_file: str,
    rotate: Optional[Dict[str, Any]],
    json_format: bool,
    tz: str,
) -> logging.Handler:
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    if rotate:
        mode = rotate.get('mode', 'size')
        if mode not in FILE_HANDLERS:
            raise ValueError(f"Unknown rotation mode: {mode}. Use one of {sorted(FILE_HANDLERS)}.")
        handler = FILE_HANDLERS[mode](log_file, rotate)
    else:
        handler = _plain_handler(log_file, {})

    handler.setFormatter(ContextFormatter("json" if json_format else "human", use_color=False, tz=tz))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate: Optional[Dict[str, Any]] = None,
    tz: str = "UTC",
    capture_warnings: bool = True,
    quiet_libs: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Configure the root logger.

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL" (case-insensitive)
    log_file : str, optional
        Also log to this file; parent directories are created
    json : bool
        JSON lines in the log file (stderr stays human-readable)
    color : bool
        Colored level names on stderr
    to_stderr : bool
        Attach the stderr handler
    rotate : dict, optional
        {"mode": "size", "max_bytes": ..., "backup_count": ...} or
        {"mode": "time", "when": "D", "interval": 1, "backup_count": ...}
    tz : str
        "UTC" (default) or "local"
    capture_warnings : bool
        Route warnings.warn() through logging
    quiet_libs : list[str], optional
        Loggers pinned to WARNING, default ["PIL"]
    context : dict, optional
        Fields pushed onto the context (e.g. {"app": "golden"})

    Returns
    -------
    dict
        {"handlers": [...]} as installed on the root logger

    Raises
    ------
    ValueError
        On an unknown rotation mode
    """
    global _configured

    root = logging.getLogger()
    if _configured:
        for old in list(root.handlers):
            root.removeHandler(old)
            old.close()

    root.setLevel(log_level.upper())

    handlers: List[logging.Handler] = []
    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("human", color, tz))
        handlers.append(console)
    if log_file:
        handlers.append(_file_handler(log_file, rotate, json, tz))
    for handler in handlers:
        root.addHandler(handler)

    for lib in quiet_libs or ["PIL"]:
        logging.getLogger(lib).setLevel(logging.WARNING)
    if context:
        push_context(**context)
    if capture_warnings:
        route_warnings()

    _configured = True
    return {'handlers': handlers}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_level(level: str) -> None:
    logging.getLogger().setLevel(level.upper())


def push_context(**kwargs) -> None:
    """Merge fields into the logging context."""
    _context_var.set({**_context_var.get(), **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Drop ``keys`` from the context (missing keys ignored); None clears it."""
    if keys is None:
        _context_var.set({})
        return
    remaining = {k: v for k, v in _context_var.get().items() if k not in keys}
    _context_var.set(remaining)


def get_context() -> Dict[str, Any]:
    return dict(_context_var.get())


def install_excepthook() -> None:
    """Log uncaught exceptions at CRITICAL; Ctrl+C keeps the default hook."""
    def hook(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logging.getLogger(__name__).critical(
            "Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = hook


def route_warnings() -> None:
    logging.captureWarnings(True)
    logging.getLogger('py.warnings').setLevel(logging.WARNING)
