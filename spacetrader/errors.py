"""Recording, filtering and analysing errors raised while the game runs."""

from __future__ import annotations

import threading
import time
from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime
from itertools import combinations
from typing import Optional

from spacetrader.debuglog import LogLevel, log

MAX_ERRORS = 1000
"""How many error records are kept before the oldest are dropped."""

_MODULE = "error_analysis"
_RECENT_WINDOW = 15 * 60
_CORRELATION_WINDOW = 5.0

_queue: deque[ErrorRecord] = deque(maxlen=MAX_ERRORS)
_lock = threading.Lock()


@dataclass(frozen=True)
class ErrorRecord:
    """One recorded error; ``timestamp`` is seconds since the Unix epoch."""

    timestamp: float
    module: str
    error_type: str
    message: str
    context: Optional[dict[str, str]] = None

    def __str__(self) -> str:
        stamp = datetime.fromtimestamp(self.timestamp).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        text = f"[{stamp}] {self.module}::{self.error_type}: {self.message}"
        if self.context is not None:
            text += "\nContext:" + "".join(
                f"\n  {key}: {value}" for key, value in self.context.items()
            )
        return text


def record_error(
    module: str,
    error_type: str,
    message: str,
    context: Optional[dict[str, str]] = None,
) -> ErrorRecord:
    """Log an error and keep it for later analysis."""
    record = ErrorRecord(
        timestamp=time.time(),
        module=module,
        error_type=error_type,
        message=message,
        context=dict(context) if context is not None else None,
    )
    log(LogLevel.ERROR, _MODULE, str(record))
    with _lock:
        _queue.append(record)
    return record


def get_errors() -> list[ErrorRecord]:
    """Return every stored error, oldest first."""
    with _lock:
        return list(_queue)


def get_errors_by_module(module: str) -> list[ErrorRecord]:
    """Return the stored errors raised by one module."""
    with _lock:
        return [record for record in _queue if record.module == module]


def get_errors_by_type(error_type: str) -> list[ErrorRecord]:
    """Return the stored errors of one type."""
    with _lock:
        return [record for record in _queue if record.error_type == error_type]


def _within(record: ErrorRecord, now: float, seconds: float) -> bool:
    elapsed = now - record.timestamp
    return 0 <= elapsed <= seconds


def get_recent_errors(duration: float) -> list[ErrorRecord]:
    """Return the errors recorded in the last ``duration`` seconds."""
    now = time.time()
    with _lock:
        return [record for record in _queue if _within(record, now, duration)]


def clear_errors() -> None:
    """Forget every stored error."""
    with _lock:
        _queue.clear()


def generate_error_report() -> str:
    """Summarise stored errors by module and type and list the latest ten."""
    with _lock:
        records = list(_queue)

    if not records:
        return "No errors recorded."

    module_counts = Counter(record.module for record in records)
    type_counts = Counter(record.error_type for record in records)
    now = time.time()
    recent = sum(1 for record in records if _within(record, now, _RECENT_WINDOW))

    parts = [
        f"Error Report ({len(records)} errors)\n",
        "=======================\n\n",
        "Errors by Module:\n",
        *(f"  {module}: {count} errors\n" for module, count in module_counts.items()),
        "\n",
        "Errors by Type:\n",
        *(f"  {kind}: {count} errors\n" for kind, count in type_counts.items()),
        "\n",
        f"Recent errors (last 15 min): {recent}\n\n",
        "Most Recent Errors:\n",
    ]
    parts.extend(
        f"\n--- Error {number} ---\n{record}\n"
        for number, record in enumerate(reversed(records[-10:]), start=1)
    )
    return "".join(parts)


def _solution(module: str, error_type: str) -> str:
    match (module, error_type):
        case ("network", "connection_error"):
            return "Check network connectivity, firewall settings, and ensure the server is running."
        case ("network", "timeout"):
            return "Increase timeout values or check for network congestion."
        case ("game", "save_error"):
            return "Check file permissions and available disk space."
        case ("database", _):
            return "Verify database connection settings and schema integrity."
        case (_, "permission_denied"):
            return "Check file and resource permissions."
        case _:
            return "Review logs for more details about this error type."


def analyze_error_patterns() -> str:
    """Report the commonest error kinds, cross-module correlations and fixes."""
    with _lock:
        records = list(_queue)

    if not records:
        return "No errors to analyze."

    frequency = Counter(f"{record.module}::{record.error_type}" for record in records)
    ranked = frequency.most_common()

    parts = ["Error Pattern Analysis\n", "=====================\n\n", "Common Error Patterns:\n"]
    parts.extend(f"  {key}: {count} occurrences\n" for key, count in ranked[:5])
    parts.append("\n")

    by_module: dict[str, list[float]] = {}
    for record in records:
        by_module.setdefault(record.module, []).append(record.timestamp)

    for module_a, module_b in combinations(by_module, 2):
        correlated = sum(
            1
            for time_a in by_module[module_a]
            for time_b in by_module[module_b]
            if abs(time_a - time_b) <= _CORRELATION_WINDOW
        )
        if correlated:
            parts.append(
                f"Possible correlation between {module_a} and {module_b} modules: "
                f"{correlated} related errors\n"
            )

    parts.append("\nPotential Solutions:\n")
    for key, _count in ranked[:3]:
        module, _sep, error_type = key.partition("::")
        parts.append(f"  For {key}: {_solution(module, error_type)}\n")

    return "".join(parts)


def register_simple_error(module: str, message: str) -> ErrorRecord:
    """Record an error of the generic type ``error``."""
    return record_error(module, "error", message, None)


def get_error_count() -> int:
    """Return how many errors are stored."""
    with _lock:
        return len(_queue)