import random
import socket
import threading

import pytest

from spacetrader import connection
from spacetrader.connection import ConnectionHealth, NetworkSimulator, format_duration


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def server():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(16)
    listener.settimeout(0.2)
    stop = threading.Event()

    def serve():
        while not stop.is_set():
            try:
                conn, _addr = listener.accept()
            except OSError:
                continue
            with conn:
                conn.settimeout(2.0)
                try:
                    while conn.recv(65536):
                        pass
                except OSError:
                    pass

    worker = threading.Thread(target=serve, daemon=True)
    worker.start()
    yield listener.getsockname()[1]
    stop.set()
    worker.join(timeout=3)
    listener.close()


@pytest.fixture
def closed_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_new_connection_is_healthy_without_data():
    health = ConnectionHealth("conn")
    assert health.is_healthy() is True
    assert health.get_average_latencies() == (None, None)


def test_send_and_receive_are_counted():
    health = ConnectionHealth("conn")
    health.record_send()
    health.record_receive()
    health.record_receive()
    assert (health.send_count, health.receive_count) == (1, 2)
    assert health.is_healthy() is True


def test_high_failure_rate_is_unhealthy():
    health = ConnectionHealth("client_1")
    health.record_send()
    health.record_receive()
    health.record_send_failure("Timeout waiting for acknowledgment")
    assert health.is_healthy() is False
    report = health.generate_report()
    assert "Status: UNHEALTHY" in report
    assert "Send error: Timeout waiting for acknowledgment" in report


def test_failure_rate_at_threshold_is_healthy():
    health = ConnectionHealth("conn")
    for _ in range(10):
        health.record_send()
    health.record_receive_failure("reset")
    assert health.is_healthy() is True
    assert health.recent_errors == ["Receive error: reset"]


def test_stale_activity_is_unhealthy():
    clock = FakeClock()
    health = ConnectionHealth("conn", clock=clock)
    health.record_send()
    clock.now += 30
    assert health.is_healthy() is True
    clock.now += 31
    assert health.is_healthy() is False


def test_average_latencies_follow_inputs():
    health = ConnectionHealth("conn")
    health.record_send_latency(10)
    health.record_send_latency(10)
    health.record_receive_latency(4)
    assert health.get_average_latencies() == (10.0, 4.0)


def test_latency_history_is_bounded():
    health = ConnectionHealth("conn", max_history=100)
    for _ in range(50):
        health.record_send_latency(0)
    for _ in range(100):
        health.record_send_latency(7)
    assert health.get_average_latencies()[0] == 7.0


def test_error_history_is_bounded():
    health = ConnectionHealth("conn", max_history=3)
    for number in range(5):
        health.record_send_failure(f"e{number}")
    assert health.recent_errors == ["Send error: e2", "Send error: e3", "Send error: e4"]
    assert health.send_failures == 5


def test_report_without_latency_data():
    report = ConnectionHealth("main_connection").generate_report()
    assert report.startswith("Connection Health Report for main_connection\n")
    assert "Average send latency:    No data" in report
    assert "Average receive latency: No data" in report
    assert "Recent Errors" not in report


def test_report_lists_first_five_errors():
    health = ConnectionHealth("conn")
    for number in range(8):
        health.record_send_failure(f"failure {number}")
    report = health.generate_report()
    assert "  5. (" in report
    assert "  6. (" not in report
    assert "failure 0" in report
    assert "failure 7" not in report


def test_disabled_simulator_passes_everything():
    simulator = NetworkSimulator()
    simulator.packet_loss_percent = 100
    assert simulator.process_outgoing() is True


def test_full_packet_loss_drops_when_enabled():
    simulator = NetworkSimulator(rng=random.Random(1))
    simulator.packet_loss_percent = 100
    simulator.enable()
    assert all(not simulator.process_outgoing() for _ in range(20))
    simulator.disable()
    assert simulator.process_outgoing() is True


def test_no_loss_passes_when_enabled():
    simulator = NetworkSimulator()
    simulator.enable()
    assert simulator.process_outgoing() is True


def test_percentages_are_clamped():
    simulator = NetworkSimulator()
    simulator.packet_loss_percent = 250
    simulator.corruption_percent = 100
    simulator.duplication_percent = 101
    simulator.reordering_percent = 5
    assert simulator.packet_loss_percent == 100
    assert simulator.corruption_percent == 100
    assert simulator.duplication_percent == 100
    assert simulator.reordering_percent == 5


def test_describe_reports_settings():
    simulator = NetworkSimulator()
    simulator.latency_ms = 250
    simulator.packet_loss_percent = 5
    simulator.enable()
    text = simulator.describe()
    assert text.startswith("Network Simulator Settings:\n")
    assert "Enabled: true" in text
    assert "Latency: 250 ms" in text
    assert "Packet Loss: 5%" in text


def test_format_duration_units():
    assert format_duration(5.0) == "5.0 sec"
    assert format_duration(90.0) == "1.5 min"
    assert format_duration(7200.0) == "2.0 hr"


def test_connection_report_against_local_server(server):
    report = connection.test_connection("127.0.0.1", server, 2, 2000)
    assert f"Connection Test to 127.0.0.1:{server}" in report
    assert "Connection successful" in report
    assert "Attempt 2: Success" in report
    assert "Success rate: 2/2" in report


def test_connection_report_when_refused(closed_port):
    report = connection.test_connection("127.0.0.1", closed_port, 3, 1000)
    assert "Connection failed" in report
    assert "Multiple Connection Test" not in report


def test_bandwidth_report_against_local_server(server):
    report = connection.test_bandwidth("127.0.0.1", server, 1, 2000)
    assert "Upload Test:" in report
    assert "Sent 1 KB in" in report
    assert report.endswith("Note: Download test requires server echo support.\n")


def test_bandwidth_report_when_refused(closed_port):
    report = connection.test_bandwidth("127.0.0.1", closed_port, 1, 1000)
    assert "Connection failed" in report
    assert "Upload Test" not in report