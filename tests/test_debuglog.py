import re
import sys

import pytest

from spacetrader.debuglog import (
    LogLevel,
    debug,
    error,
    get_log_level_from_env,
    get_module_level,
    get_timing_stats,
    info,
    init,
    log,
    record_timing,
    set_module_level,
    simple_stack_trace,
    timed,
    warning,
)


@pytest.fixture(autouse=True)
def keep_excepthook(monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)


LINE = re.compile(
    r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}\] \[(\w+)\] \[(\w+)\] (.*)$"
)


def test_init_creates_directory_and_writes_line(tmp_path):
    path = tmp_path / "logs" / "game.log"
    init(str(path), False, LogLevel.INFO)
    assert path.parent.is_dir()
    log(LogLevel.INFO, "fmtmod", "hello")
    lines = path.read_text().splitlines()
    assert len(lines) == 1
    match = LINE.match(lines[0])
    assert match is not None
    assert match.groups() == ("INFO", "fmtmod", "hello")


def test_messages_below_global_level_are_dropped(tmp_path):
    path = tmp_path / "quiet.log"
    init(str(path), False, LogLevel.INFO)
    log(LogLevel.DEBUG, "quietmod", "hidden")
    assert not path.exists()


def test_module_level_overrides_global(tmp_path):
    path = tmp_path / "mod.log"
    init(str(path), False, LogLevel.ERROR)
    set_module_level("chatty", LogLevel.DEBUG)
    assert get_module_level("chatty") == LogLevel.DEBUG
    assert get_module_level("unconfigured_module") == LogLevel.ERROR
    log(LogLevel.DEBUG, "chatty", "visible")
    log(LogLevel.WARNING, "unconfigured_module", "dropped")
    lines = path.read_text().splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("[DEBUG] [chatty] visible")


def test_warning_label_is_warn(tmp_path):
    path = tmp_path / "warn.log"
    init(str(path), False, LogLevel.TRACE)
    warning("careful")
    assert "[WARN] [main] careful" in path.read_text()


def test_console_colours_and_streams(capsys):
    init(None, True, LogLevel.TRACE)
    error("boom")
    info("fine")
    captured = capsys.readouterr()
    assert "\x1b[31m" in captured.err
    assert "[ERROR] [main] boom" in captured.err
    assert "\x1b[32m" in captured.out
    assert "[INFO] [main] fine" in captured.out


def test_console_disabled_prints_nothing(capsys):
    init(None, False, LogLevel.TRACE)
    debug("silent")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


@pytest.mark.parametrize(
    "value,expected",
    [
        ("trace", LogLevel.TRACE),
        ("debug", LogLevel.DEBUG),
        ("info", LogLevel.INFO),
        ("warn", LogLevel.WARNING),
        ("warning", LogLevel.WARNING),
        ("error", LogLevel.ERROR),
        ("loud", LogLevel.INFO),
    ],
)
def test_level_from_env(monkeypatch, value, expected):
    monkeypatch.setenv("DEBUG_LEVEL", value)
    assert get_log_level_from_env() == expected


def test_level_from_env_default(monkeypatch):
    monkeypatch.delenv("DEBUG_LEVEL", raising=False)
    assert get_log_level_from_env() == LogLevel.INFO


def test_levels_filter_in_order(tmp_path):
    path = tmp_path / "order.log"
    init(str(path), False, LogLevel.WARNING)
    for level in (LogLevel.TRACE, LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARNING, LogLevel.ERROR):
        log(level, "ordermod", "msg")
    labels = [LINE.match(line).group(1) for line in path.read_text().splitlines()]
    assert labels == ["WARN", "ERROR"]


def test_timing_stats():
    record_timing("stats_op", 1.0)
    record_timing("stats_op", 3.0)
    record_timing("stats_op", 2.0)
    assert get_timing_stats("stats_op") == (1.0, 2.0, 3.0)


def test_timing_stats_unknown():
    assert get_timing_stats("never_recorded_op") is None


def test_timed_records_unique_operations():
    init(None, False, LogLevel.INFO)
    with timed("blk") as first:
        pass
    with timed("blk") as second:
        pass
    assert first.startswith("blk_")
    assert second.startswith("blk_")
    assert first != second
    stats = get_timing_stats(first)
    assert stats[0] == stats[2]
    assert stats[0] >= 0.0


def test_stack_trace_mentions_caller():
    assert "test_stack_trace_mentions_caller" in simple_stack_trace()


def test_uncaught_exception_is_logged(tmp_path, capsys):
    path = tmp_path / "panic.log"
    init(str(path), False, LogLevel.INFO)
    try:
        raise ValueError("kaput")
    except ValueError:
        sys.excepthook(*sys.exc_info())
    text = path.read_text()
    assert "[panic] PANIC in thread" in text
    assert "kaput" in text
    assert "kaput" in capsys.readouterr().err