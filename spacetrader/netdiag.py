"""Network diagnostics: interfaces, ports, pings, bandwidth and DNS."""

from __future__ import annotations

import ipaddress
import os
import platform
import socket
import time
from typing import Optional, Union

import psutil

from spacetrader.debuglog import LogLevel, log

_MODULE = "network"

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def _parse_ip(host: str) -> Optional[IPAddress]:
    """Accept an IPv4 literal or a bracketed IPv6 literal; hostnames are rejected."""
    try:
        if host.startswith("[") and host.endswith("]"):
            return ipaddress.IPv6Address(host[1:-1])
        return ipaddress.IPv4Address(host)
    except ValueError:
        return None


class NetworkDiagnostics:
    """Helpers for checking connectivity and the local network setup."""

    @staticmethod
    def get_interfaces() -> list[tuple[str, str, Optional[str]]]:
        """Return (interface name, address, netmask) for every IP address."""
        interfaces = []
        for name, addresses in psutil.net_if_addrs().items():
            for address in addresses:
                if address.family in (socket.AF_INET, socket.AF_INET6):
                    interfaces.append((name, address.address, address.netmask))
        return interfaces

    @staticmethod
    def get_interfaces_summary() -> str:
        """Describe each interface address on its own line."""
        try:
            interfaces = NetworkDiagnostics.get_interfaces()
        except OSError as exc:
            return f"Error getting network interfaces: {exc}"
        return "".join(
            f"{name}: {address}/{netmask or ''}\n" for name, address, netmask in interfaces
        )

    @staticmethod
    def check_port(host: str, port: int, timeout_ms: int) -> bool:
        """Return True if a TCP connection to an IP-literal host succeeds in time."""
        ip = _parse_ip(host)
        if ip is None:
            return False
        try:
            with socket.create_connection((str(ip), port), timeout=timeout_ms / 1000):
                return True
        except OSError:
            return False

    @staticmethod
    def check_port_available(port: int) -> bool:
        """Return True if the port can be bound on all local IPv4 addresses."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            if os.name != "nt":
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                sock.bind(("0.0.0.0", port))
                sock.listen(1)
            except OSError:
                return False
        return True

    @staticmethod
    def ping_host(host: str, count: int) -> list[float]:
        """TCP-connect to port 80 ``count`` times; return the successful times in seconds."""
        port = 80
        results = []
        log(LogLevel.INFO, _MODULE, f"Pinging {host} with TCP ping on port {port}")
        for attempt in range(count):
            log(LogLevel.DEBUG, _MODULE, f"Ping attempt {attempt + 1}/{count}")
            start = time.perf_counter()
            try:
                connection = socket.create_connection((host, port))
            except OSError as exc:
                log(LogLevel.ERROR, _MODULE, f"Ping failed: {exc}")
            else:
                elapsed = time.perf_counter() - start
                connection.close()
                log(LogLevel.DEBUG, _MODULE, f"Ping successful: {elapsed:.6f}s")
                results.append(elapsed)
            if attempt < count - 1:
                time.sleep(1.0)
        return results

    @staticmethod
    def network_environment_report() -> str:
        """Summarise interfaces, common local ports and external reachability."""
        lines = [
            "Network Environment Report\n",
            "=========================\n\n",
            "Network Interfaces:\n",
            NetworkDiagnostics.get_interfaces_summary(),
            "\n",
            "Common Ports Status (localhost):\n",
        ]
        for port in (80, 443, 8080, 7878, 7890):
            status = "available" if NetworkDiagnostics.check_port_available(port) else "in use"
            lines.append(f"- Port {port}: {status}\n")

        lines.append("\nExternal Connectivity:\n")
        for host in ("google.com", "github.com", "api.github.com"):
            reachable = NetworkDiagnostics.check_port(host, 443, 5000)
            lines.append(f"- {host}: {'reachable' if reachable else 'unreachable'}\n")
        return "".join(lines)

    @staticmethod
    def measure_bandwidth(host: str, port: int, size_kb: int) -> float:
        """Request a payload over HTTP and return the download rate in Mbps."""
        log(LogLevel.INFO, _MODULE, f"Measuring bandwidth from {host}:{port} with {size_kb}KB")
        with socket.create_connection((host, port)) as stream:
            request = (
                f"GET /bandwidth?size={size_kb} HTTP/1.1\r\n"
                f"Host: {host}\r\nConnection: close\r\n\r\n"
            )
            stream.sendall(request.encode())

            start = time.perf_counter()
            total_bytes = 0
            while chunk := stream.recv(8192):
                total_bytes += len(chunk)
            seconds = time.perf_counter() - start

        bits = total_bytes * 8.0
        if seconds > 0:
            mbps = bits / seconds / 1_000_000.0
        else:
            mbps = float("inf") if bits else float("nan")
        log(
            LogLevel.INFO,
            _MODULE,
            f"Bandwidth test complete. Received {total_bytes} bytes in "
            f"{seconds:.2f} seconds ({mbps:.2f} Mbps)",
        )
        return mbps

    @staticmethod
    def check_dns(hostname: str) -> list[IPAddress]:
        """Resolve a hostname to its IP addresses."""
        log(LogLevel.INFO, _MODULE, f"Resolving hostname: {hostname}")
        infos = socket.getaddrinfo(hostname, 0, type=socket.SOCK_STREAM)
        addresses = [ipaddress.ip_address(info[4][0].split("%")[0]) for info in infos]
        log(LogLevel.INFO, _MODULE, f"Resolved {hostname} to {len(addresses)} addresses")
        for number, address in enumerate(addresses, start=1):
            log(LogLevel.DEBUG, _MODULE, f"  Address {number}: {address}")
        return addresses


def _os_name() -> str:
    name = platform.system().lower()
    return {"darwin": "macos"}.get(name, name)


def system_info() -> str:
    """Describe the host name, CPU count, OS and network interfaces."""
    try:
        hostname = socket.gethostname()
    except OSError:
        hostname = "unknown"
    return (
        "System Information:\n"
        f"- Hostname: {hostname}\n"
        f"- CPU Cores: {os.cpu_count() or 1}\n"
        f"- OS: {_os_name()}\n"
        "- Memory: [Feature not implemented]\n"
        f"- Network Interfaces: {NetworkDiagnostics.get_interfaces_summary()}\n"
    )