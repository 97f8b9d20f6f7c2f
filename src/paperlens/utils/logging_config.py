"""
Logging for PaperLens.

Two layers:

- ``configure_logging()`` sets up the standard ``logging`` root once, for the
  module loggers used throughout services and adapters.
- ``Logger`` writes request-scoped lines into named, rotating files under
  ``PAPERLENS_LOG_DIR``, tagged with the trace id of the current request:

    from paperlens.utils.logging_config import Logger, LogFiles, set_trace_id

    set_trace_id()
    Logger.info("search query=graph", file=LogFiles.SEARCH)

Environment:
    PAPERLENS_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
    PAPERLENS_LOG_DIR: directory for log files (default: logs/)
    PAPERLENS_LOG_MAX_BYTES: rotation size per file (default: 10MB)
    PAPERLENS_LOG_BACKUP_COUNT: rotated files to keep (default: 5)
"""

from __future__ import annotations

import logging
import os
import threading
import uuid
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

import yaml

_trace_id_var: ContextVar[Optional[str]] = ContextVar("paperlens_trace_id", default=None)

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "paperlens.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(trace_id)s] %(filename)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_CONFIG_FILE = Path(__file__).parent / "log_config.yaml"

_DEFAULT_FILES = {
    "api": "api/api.log",
    "error": "errors/error.log",
}


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


def _load_file_map() -> Dict[str, str]:
    files = dict(_DEFAULT_FILES)
    if LOG_CONFIG_FILE.exists():
        with open(LOG_CONFIG_FILE, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        files.update({str(k).lower(): str(v) for k, v in (config.get("files") or {}).items()})
    return files


class _LogFilesMeta(type):
    def __getattr__(cls, name: str) -> str:
        if name.startswith("_"):
            raise AttributeError(name)
        files = cls._files()
        key = name.lower()
        if key in files:
            return files[key]
        raise AttributeError(f"Log file '{name}' not found in config")


class LogFiles(metaclass=_LogFilesMeta):
    """Named log files from ``log_config.yaml``, e.g. ``LogFiles.SEARCH``."""

    _cache: Optional[Dict[str, str]] = None

    @classmethod
    def _files(cls) -> Dict[str, str]:
        if cls._cache is None:
            cls._cache = _load_file_map()
        return cls._cache

    @classmethod
    def get(cls, name: str) -> str:
        return cls._files().get(name.lower(), f"{name}/{name}.log")


class _TraceIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = _trace_id_var.get() or "-"
        return True


_lock = threading.Lock()
_config: Dict[str, object] = {}
_file_loggers: Dict[str, logging.Logger] = {}


def _settings() -> Dict[str, object]:
    if not _config:
        _config.update(
            level=os.environ.get("PAPERLENS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            base_dir=os.environ.get("PAPERLENS_LOG_DIR", DEFAULT_LOG_DIR),
            max_bytes=_env_int("PAPERLENS_LOG_MAX_BYTES", DEFAULT_MAX_BYTES),
            backup_count=_env_int("PAPERLENS_LOG_BACKUP_COUNT", DEFAULT_BACKUP_COUNT),
        )
    return _config


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger for console output."""
    resolved = (level or str(_settings()["level"])).upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        datefmt=DATE_FORMAT,
    )


def _file_logger(file: Optional[str]) -> logging.Logger:
    config = _settings()
    relative = file or DEFAULT_LOG_FILE
    with _lock:
        existing = _file_loggers.get(relative)
        if existing is not None:
            return existing

        path = Path(str(config["base_dir"])) / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=str(path),
            maxBytes=int(config["max_bytes"]),
            backupCount=int(config["backup_count"]),
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler.addFilter(_TraceIdFilter())

        file_logger = logging.getLogger(f"paperlens.files.{relative}")
        file_logger.setLevel(getattr(logging, str(config["level"]), logging.INFO))
        file_logger.propagate = False
        file_logger.addHandler(handler)
        _file_loggers[relative] = file_logger
        return file_logger


class Logger:
    """Static helpers writing to a named log file; caller file and line are recorded."""

    @staticmethod
    def debug(message: str, file: Optional[str] = None) -> None:
        _file_logger(file).debug(message, stacklevel=2)

    @staticmethod
    def info(message: str, file: Optional[str] = None) -> None:
        _file_logger(file).info(message, stacklevel=2)

    @staticmethod
    def warning(message: str, file: Optional[str] = None) -> None:
        _file_logger(file).warning(message, stacklevel=2)

    @staticmethod
    def error(message: str, file: Optional[str] = None) -> None:
        _file_logger(file).error(message, stacklevel=2)

    @staticmethod
    def set_level(level: str) -> None:
        _settings()["level"] = level.upper()
        for file_logger in _file_loggers.values():
            file_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    @staticmethod
    def close() -> None:
        with _lock:
            for file_logger in _file_loggers.values():
                for handler in list(file_logger.handlers):
                    handler.close()
                    file_logger.removeHandler(handler)
            _file_loggers.clear()
        _config.clear()


def generate_trace_id() -> str:
    return f"req-{uuid.uuid4().hex[:12]}"


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Bind a trace id (new unless given) to the current context and return it."""
    tid = trace_id or generate_trace_id()
    _trace_id_var.set(tid)
    return tid


def get_trace_id() -> Optional[str]:
    return _trace_id_var.get()


def clear_trace_id() -> None:
    _trace_id_var.set(None)
