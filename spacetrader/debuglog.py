"""Levelled logging, timing statistics and crash reporting."""

from __future__ import annotations

import itertools
import os
import sys
import threading
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Iterator, Optional


class LogLevel(IntEnum):
    """Severity of a log message, ordered from least to most severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4

    def __str__(self) -> str:
        return _LABELS[self]


_LABELS = {
    LogLevel.TRACE: "TRACE",
    LogLevel.DEBUG: "DEBUG",
    LogLevel.INFO: "INFO",
    LogLevel.WARNING: "WARN",
    LogLevel.ERROR: "ERROR",
}

_COLOURS = {
    LogLevel.ERROR: "\x1b[31m",
    LogLevel.WARNING: "\x1b[33m",
    LogLevel.INFO: "\x1b[32m",
    LogLevel.DEBUG: "\x1b[36m",
    LogLevel.TRACE: "\x1b[90m",
}
_RESET = "\x1b[0m"

_ENV_LEVELS = {
    "trace": LogLevel.TRACE,
    "debug": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "warn": LogLevel.WARNING,
    "warning": LogLevel.WARNING,
    "error": LogLevel.ERROR,
}


@dataclass
class _Config:
    file_path: Optional[str] = None
    print_to_console: bool = True
    global_level: LogLevel = LogLevel.INFO
    module_levels: dict[str, LogLevel] = field(default_factory=dict)


_config = _Config()
_lock = threading.RLock()
_timings: dict[str, list[float]] = {}
_timings_lock = threading.Lock()
_operation_ids = itertools.count()
_operation_lock = threading.Lock()


def _excepthook(exc_type, exc_value, exc_tb) -> None:
    thread_name = threading.current_thread().name or "<unnamed>"
    frames = traceback.extract_tb(exc_tb)
    location = f"{frames[-1].filename}:{frames[-1].lineno}" if frames else "unknown location"
    backtrace = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    message = (
        f"PANIC in thread '{thread_name}' at {location}: {exc_value}\n"
        f"Backtrace:\n{backtrace}"
    )
    log(LogLevel.ERROR, "panic", message)
    print(message, file=sys.stderr)


def init(file_path: Optional[str], print_to_console: bool, global_level: LogLevel) -> None:
    """Configure the logger and install a handler for uncaught exceptions."""
    with _lock:
        _config.file_path = str(file_path) if file_path is not None else None
        _config.print_to_console = print_to_console
        _config.global_level = LogLevel(global_level)
        if _config.file_path is not None:
            directory = Path(_config.file_path).parent
            if not directory.exists():
                try:
                    directory.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    print(f"Failed to create log directory: {exc}", file=sys.stderr)
    sys.excepthook = _excepthook


def set_module_level(module: str, level: LogLevel) -> None:
    """Set the minimum level logged for one module."""
    with _lock:
        _config.module_levels[module] = LogLevel(level)


def get_module_level(module: str) -> LogLevel:
    """Return the minimum level for a module, falling back to the global one."""
    with _lock:
        return _config.module_levels.get(module, _config.global_level)


def get_log_level_from_env() -> LogLevel:
    """Read the level from the DEBUG_LEVEL environment variable, default INFO."""
    return _ENV_LEVELS.get(os.environ.get("DEBUG_LEVEL", ""), LogLevel.INFO)


def log(level: LogLevel, module: str, message: str) -> None:
    """Log a message for a module if its level passes the module's threshold."""
    level = LogLevel(level)
    with _lock:
        if level < _config.module_levels.get(module, _config.global_level):
            return

        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        formatted = f"[{timestamp}] [{level!s}] [{module}] {message}"

        if _config.print_to_console:
            stream = sys.stderr if level >= LogLevel.WARNING else sys.stdout
            print(f"{_COLOURS[level]}{formatted}{_RESET}", file=stream)

        if _config.file_path is not None:
            try:
                with open(_config.file_path, "a", encoding="utf-8") as handle:
                    handle.write(formatted + "\n")
            except OSError as exc:
                print(f"Failed to write to log file: {exc}", file=sys.stderr)


def record_timing(operation: str, duration: float) -> None:
    """Record how many seconds an operation took."""
    with _timings_lock:
        _timings.setdefault(operation, []).append(duration)


def get_timing_stats(operation: str) -> Optional[tuple[float, float, float]]:
    """Return (min, average, max) seconds for an operation, or None if unknown."""
    with _timings_lock:
        durations = _timings.get(operation)
        if not durations:
            return None
        return min(durations), sum(durations) / len(durations), max(durations)


@contextmanager
def timed(operation: str) -> Iterator[str]:
    """Time the enclosed block under a unique name derived from ``operation``."""
    with _operation_lock:
        op_id = next(_operation_ids)
    name = f"{operation}_{op_id}"
    log(LogLevel.TRACE, "debug", f"Starting operation: {name}")
    start = time.perf_counter()
    try:
        yield name
    finally:
        duration = time.perf_counter() - start
        record_timing(name, duration)
        log(LogLevel.TRACE, "debug", f"Completed operation: {name} in {duration:.6f}s")


def simple_stack_trace() -> str:
    """Return the current call stack as text."""
    return "".join(traceback.format_stack()[:-1])


def info(msg: str) -> None:
    log(LogLevel.INFO, "main", msg)


def debug(msg: str) -> None:
    log(LogLevel.DEBUG, "main", msg)


def error(msg: str) -> None:
    log(LogLevel.ERROR, "main", msg)


def warning(msg: str) -> None:
    log(LogLevel.WARNING, "main", msg)


def trace(msg: str) -> None:
    log(LogLevel.TRACE, "main", msg)