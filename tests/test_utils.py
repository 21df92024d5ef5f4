"""Unit tests for utility modules."""

import json
import sys

import pytest
from utils import crash
from utils.ksuid import generate_ksuid, ksuid_time, KSUID_LENGTH
from utils.timestamp import format_timestamp, monotonic_s, now_micros


class TestKSUID:
    """Tests for KSUID generation."""

    def test_generate_ksuid_length(self):
        """KSUID is a fixed-length string."""
        ksuid = generate_ksuid()
        assert isinstance(ksuid, str)
        assert len(ksuid) == KSUID_LENGTH

    def test_generate_ksuid_unique(self):
        """KSUIDs are unique."""
        assert len({generate_ksuid() for _ in range(100)}) == 100

    def test_ksuid_sorts_by_time(self):
        """Later timestamps sort after earlier ones."""
        assert generate_ksuid(1_600_000_000) < generate_ksuid(1_700_000_000)

    def test_ksuid_time_roundtrip(self):
        """ksuid_time recovers the embedded seconds."""
        assert ksuid_time(generate_ksuid(1_700_000_123)) == 1_700_000_123

    def test_ksuid_time_rejects_bad_length(self):
        with pytest.raises(ValueError):
            ksuid_time("abc")


class TestTimestamp:
    """Tests for timestamp utilities."""

    def test_format_timestamp_fixed(self):
        """Known epoch formats as ISO 8601 UTC with microseconds."""
        assert format_timestamp(1_000_000) == "1970-01-01T00:00:01.000000Z"

    def test_format_timestamp_now(self):
        ts = format_timestamp()
        assert "T" in ts and ts.endswith("Z")

    def test_now_micros_reasonable_value(self):
        """now_micros is an int after 2020."""
        micros = now_micros()
        assert isinstance(micros, int)
        assert micros > 1577836808000000

    def test_monotonic_s_increases(self):
        first = monotonic_s()
        assert monotonic_s() >= first


class TestCrashHandler:
    """Tests for crash handling utilities."""

    @pytest.fixture(autouse=True)
    def crash_file(self, tmp_path):
        original = crash._crash_log
        path = tmp_path / "crash" / "crash.log"
        crash.configure(str(path))
        yield path
        crash.configure(original)

    def test_install_crash_handler(self, monkeypatch):
        """install_crash_handler sets sys.excepthook."""
        monkeypatch.setattr(sys, "excepthook", sys.__excepthook__)
        crash.install_crash_handler()
        assert sys.excepthook == crash.log_crash

    def test_log_crash_writes_record(self, crash_file, capsys):
        """log_crash appends a JSON record and prints a banner."""
        try:
            raise RuntimeError("world exploded")
        except RuntimeError:
            record = crash.log_crash(*sys.exc_info())

        lines = crash_file.read_text().splitlines()
        assert len(lines) == 1
        stored = json.loads(lines[0])
        assert stored["id"] == record["id"]
        assert stored["type"] == "RuntimeError"
        assert stored["msg"] == "world exploded"
        assert "Traceback" in stored["traceback"]
        assert "CRASH" in capsys.readouterr().err

    def test_async_handler_writes_record(self, crash_file):
        """Loop exception handler records the task failure."""
        handler = crash.create_async_handler()
        handler(None, {"message": "Task exception was never retrieved",
                           "exception": ValueError("bad tick")})
        stored = json.loads(crash_file.read_text().splitlines()[0])
        assert stored["type"] == "ValueError"
        assert stored["context"]["message"] == "Task exception was never retrieved"

    def test_async_handler_without_exception(self, crash_file):
        handler = crash.create_async_handler()
        handler(None, {"message": "something odd"})
        stored = json.loads(crash_file.read_text().splitlines()[0])
        assert stored["type"] == "Unknown"
        assert stored["traceback"] is None
