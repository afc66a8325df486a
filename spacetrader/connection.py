"""Connection health tracking, a lossy-network simulator and connection tests."""

from __future__ import annotations

import random
import socket
import threading
import time
from collections import deque
from typing import Callable, Optional

from spacetrader.debuglog import LogLevel, log

_MODULE = "client_server"
DEFAULT_HISTORY_SIZE = 100
_STALE_AFTER = 60.0
_MAX_FAILURE_RATE = 0.1


def format_duration(duration: float) -> str:
    """Render a duration in seconds as seconds, minutes or hours."""
    whole_seconds = int(duration)
    if whole_seconds < 60:
        return f"{duration:.1f} sec"
    if whole_seconds < 3600:
        return f"{duration / 60.0:.1f} min"
    return f"{duration / 3600.0:.1f} hr"


class ConnectionHealth:
    """Counts traffic, failures and latencies of one client-server connection."""

    def __init__(
        self,
        connection_id: str,
        max_history: int = DEFAULT_HISTORY_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.connection_id = connection_id
        self.max_history = max_history
        self._clock = clock
        self._lock = threading.Lock()
        self._send_count = 0
        self._receive_count = 0
        self._send_failures = 0
        self._receive_failures = 0
        self._last_send: Optional[float] = None
        self._last_receive: Optional[float] = None
        self._send_latencies: deque[int] = deque(maxlen=max_history)
        self._receive_latencies: deque[int] = deque(maxlen=max_history)
        self._recent_errors: deque[tuple[float, str]] = deque(maxlen=max_history)

    @property
    def send_count(self) -> int:
        return self._send_count

    @property
    def receive_count(self) -> int:
        return self._receive_count

    @property
    def send_failures(self) -> int:
        return self._send_failures

    @property
    def receive_failures(self) -> int:
        return self._receive_failures

    @property
    def recent_errors(self) -> list[str]:
        """Messages of the recorded errors, oldest first."""
        with self._lock:
            return [message for _stamp, message in self._recent_errors]

    def record_send(self) -> None:
        with self._lock:
            self._send_count += 1
            self._last_send = self._clock()

    def record_receive(self) -> None:
        with self._lock:
            self._receive_count += 1
            self._last_receive = self._clock()

    def record_send_failure(self, error: str) -> None:
        with self._lock:
            self._send_failures += 1
            self._recent_errors.append((self._clock(), f"Send error: {error}"))

    def record_receive_failure(self, error: str) -> None:
        with self._lock:
            self._receive_failures += 1
            self._recent_errors.append((self._clock(), f"Receive error: {error}"))

    def record_send_latency(self, latency_ms: int) -> None:
        with self._lock:
            self._send_latencies.append(latency_ms)

    def record_receive_latency(self, latency_ms: int) -> None:
        with self._lock:
            self._receive_latencies.append(latency_ms)

    def is_healthy(self) -> bool:
        """False when over 10% of operations failed or activity went quiet for 60 s."""
        with self._lock:
            total_ops = self._send_count + self._receive_count
            total_failures = self._send_failures + self._receive_failures
            if total_ops == 0:
                return True
            if total_failures > 0 and total_failures / total_ops > _MAX_FAILURE_RATE:
                return False
            now = self._clock()
            return all(
                last is None or now - last <= _STALE_AFTER
                for last in (self._last_send, self._last_receive)
            )

    def get_average_latencies(self) -> tuple[Optional[float], Optional[float]]:
        """Return the mean (send, receive) latency in ms, None where there is no data."""
        with self._lock:
            return _mean(self._send_latencies), _mean(self._receive_latencies)

    def generate_report(self) -> str:
        """Describe counters, success rates, latencies and the first recorded errors."""
        healthy = self.is_healthy()
        avg_send, avg_receive = self.get_average_latencies()
        with self._lock:
            send_count = self._send_count
            receive_count = self._receive_count
            send_failures = self._send_failures
            receive_failures = self._receive_failures
            errors = list(self._recent_errors)
        now = self._clock()

        lines = [
            f"Connection Health Report for {self.connection_id}\n",
            "===============================\n\n",
            f"Status: {'HEALTHY' if healthy else 'UNHEALTHY'}\n\n",
            "Activity:\n",
            f"  Send operations:    {send_count}\n",
            f"  Receive operations: {receive_count}\n",
            f"  Send failures:      {send_failures}\n",
            f"  Receive failures:   {receive_failures}\n",
        ]
        if send_count > 0:
            rate = (send_count - send_failures) / send_count * 100.0
            lines.append(f"  Send success rate:   {rate:.1f}%\n")
        if receive_count > 0:
            rate = (receive_count - receive_failures) / receive_count * 100.0
            lines.append(f"  Receive success rate: {rate:.1f}%\n")

        lines.append("\nLatency:\n")
        if avg_send is not None:
            lines.append(f"  Average send latency:    {avg_send:.2f} ms\n")
        else:
            lines.append("  Average send latency:    No data\n")
        if avg_receive is not None:
            lines.append(f"  Average receive latency: {avg_receive:.2f} ms\n")
        else:
            lines.append("  Average receive latency: No data\n")

        if errors:
            lines.append("\nRecent Errors:\n")
            lines.extend(
                f"  {number}. ({format_duration(max(now - stamp, 0.0))} ago) {message}\n"
                for number, (stamp, message) in enumerate(errors[:5], start=1)
            )
        return "".join(lines)


def _mean(values: deque[int]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def _percent(value: int) -> int:
    return max(0, min(int(value), 100))


class NetworkSimulator:
    """Adds latency and packet loss to outgoing messages while enabled."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._lock = threading.Lock()
        self._rng = rng if rng is not None else random.Random()
        self.enabled = False
        self.latency_ms = 0
        self._packet_loss_percent = 0
        self._corruption_percent = 0
        self._duplication_percent = 0
        self._reordering_percent = 0

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    @property
    def packet_loss_percent(self) -> int:
        return self._packet_loss_percent

    @packet_loss_percent.setter
    def packet_loss_percent(self, percent: int) -> None:
        self._packet_loss_percent = _percent(percent)

    @property
    def corruption_percent(self) -> int:
        return self._corruption_percent

    @corruption_percent.setter
    def corruption_percent(self, percent: int) -> None:
        self._corruption_percent = _percent(percent)

    @property
    def duplication_percent(self) -> int:
        return self._duplication_percent

    @duplication_percent.setter
    def duplication_percent(self, percent: int) -> None:
        self._duplication_percent = _percent(percent)

    @property
    def reordering_percent(self) -> int:
        return self._reordering_percent

    @reordering_percent.setter
    def reordering_percent(self, percent: int) -> None:
        self._reordering_percent = _percent(percent)

    def process_outgoing(self) -> bool:
        """Return False if the message is dropped; otherwise delay it and return True."""
        if not self.enabled:
            return True
        loss = self._packet_loss_percent
        if loss > 0:
            with self._lock:
                roll = self._rng.randrange(100)
            if roll < loss:
                return False
        if self.latency_ms > 0:
            time.sleep(self.latency_ms / 1000.0)
        return True

    def describe(self) -> str:
        """Return the current settings as text."""
        return (
            "Network Simulator Settings:\n"
            f"Enabled: {'true' if self.enabled else 'false'}\n"
            f"Latency: {self.latency_ms} ms\n"
            f"Packet Loss: {self._packet_loss_percent}%\n"
            f"Corruption: {self._corruption_percent}%\n"
            f"Duplication: {self._duplication_percent}%\n"
            f"Reordering: {self._reordering_percent}%"
        )


def _connect(host: str, port: int, timeout_ms: int) -> socket.socket:
    return socket.create_connection((host, port), timeout=timeout_ms / 1000.0)


def test_connection(host: str, port: int, repeat: int, timeout_ms: int) -> str:
    """Connect once, then ``repeat`` more times, and report the connect times."""
    lines = [f"Connection Test to {host}:{port}\n", "==========================\n\n"]
    log(LogLevel.INFO, _MODULE, f"Testing connection to {host}:{port}")

    lines.append("Basic Connectivity Test:\n")
    start = time.perf_counter()
    try:
        _connect(host, port, timeout_ms).close()
    except OSError as exc:
        lines.append(f"  Connection failed: {exc}\n")
        return "".join(lines)
    lines.append(f"  Connection successful ({int((time.perf_counter() - start) * 1000)} ms)\n")

    lines.append("\nMultiple Connection Test:\n")
    times: list[int] = []
    for attempt in range(1, repeat + 1):
        lines.append(f"  Attempt {attempt}: ")
        start = time.perf_counter()
        try:
            _connect(host, port, timeout_ms).close()
        except OSError as exc:
            lines.append(f"Failed: {exc}\n")
        else:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            lines.append(f"Success ({elapsed_ms} ms)\n")
            times.append(elapsed_ms)
        time.sleep(0.1)

    successful = len(times)
    rate = successful / repeat * 100.0 if repeat else float("nan")
    lines.append("\nConnection Summary:\n")
    lines.append(f"  Success rate: {successful}/{repeat} ({rate:.1f}%)\n")
    if times:
        lines.append(f"  Average connect time: {sum(times) / successful:.2f} ms\n")
        lines.append(f"  Min connect time: {min(times)} ms\n")
        lines.append(f"  Max connect time: {max(times)} ms\n")
    return "".join(lines)


def test_bandwidth(host: str, port: int, test_size_kb: int, timeout_ms: int) -> str:
    """Upload ``test_size_kb`` KiB to a server and report the upload rate."""
    lines = [f"Bandwidth Test to {host}:{port}\n", "========================\n\n"]
    log(LogLevel.INFO, _MODULE, f"Testing bandwidth to {host}:{port}")

    try:
        stream = _connect(host, port, timeout_ms)
    except OSError as exc:
        lines.append(f"Connection failed: {exc}\n")
        return "".join(lines)

    with stream:
        stream.settimeout(timeout_ms / 1000.0)
        lines.append("Upload Test:\n")
        data_size = test_size_kb * 1024
        data = b"X" * data_size
        start = time.perf_counter()
        try:
            stream.sendall(data)
        except OSError as exc:
            lines.append(f"  Upload failed: {exc}\n")
        else:
            seconds = time.perf_counter() - start
            bits = data_size * 8.0
            if seconds > 0:
                mbps = bits / seconds / 1_000_000.0
            else:
                mbps = float("inf") if bits else float("nan")
            lines.append(
                f"  Sent {test_size_kb} KB in {seconds:.2f} seconds ({mbps:.2f} Mbps)\n"
            )

    lines.append("\nNote: Download test requires server echo support.\n")
    return "".join(lines)