"""JSON-lines logging: a stderr logger for the process and a queued file sink for simulation output."""

import asyncio
import json
import os
import sys
import threading
from enum import IntEnum
from utils.timestamp import format_timestamp


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def parse(cls, name, default=None):
        """Level from a config string; unknown names fall back to default (INFO)."""
        try:
            return cls[name.upper()]
        except (KeyError, AttributeError):
            return cls.INFO if default is None else default


_logger = None
_logger_lock = threading.Lock()


class StructuredLogger:
    """One JSON object per line. bind() derives a logger that adds fixed fields to every record."""

    def __init__(self, level=LogLevel.INFO, fields=None, stream=None):
        self.level = level
        self.fields = dict(fields or {})
        self.stream = stream

    def bind(self, **fields):
        return type(self)(self.level, {**self.fields, **fields}, self.stream)

    def enabled(self, level):
        return level >= self.level

    def log(self, level, message, error=None, **fields):
        if not self.enabled(level):
            return
        record = {"timestamp": format_timestamp(), "level": level.name, "msg": message}
        record.update(self.fields)
        record.update(fields)
        if error is not None:
            record["err"] = str(error)
        line = json.dumps(record, default=str)
        try:
            print(line, file=self.stream or sys.stderr, flush=True)
        except (OSError, ValueError):
            # closed stream during interpreter shutdown
            pass

    def debug(self, message, **fields):
        self.log(LogLevel.DEBUG, message, **fields)

    def info(self, message, **fields):
        self.log(LogLevel.INFO, message, **fields)

    def warn(self, message, error=None, **fields):
        self.log(LogLevel.WARN, message, error, **fields)

    def error(self, message, error=None, **fields):
        self.log(LogLevel.ERROR, message, error, **fields)

    @classmethod
    def configure(cls, min_level=LogLevel.INFO, stream=None):
        """Replace the process logger. Loggers bound earlier keep their old settings."""
        global _logger
        with _logger_lock:
            _logger = cls(min_level, stream=stream)
        return _logger


def get_logger(**fields):
    """Process logger, created on first use; keyword fields return a bound child."""
    global _logger
    if _logger is None:
        with _logger_lock:
            if _logger is None:
                _logger = StructuredLogger()
    return _logger.bind(**fields) if fields else _logger


class AsyncFileLogger:
    """Appends snapshots and engine events to a JSON-lines file from a background task.

    try_log never blocks the caller: records beyond queue_size are counted as dropped.
    """

    POLL_S = 0.5

    def __init__(self, file_path, queue_size=1000):
        self.path = file_path
        self.queue = asyncio.Queue(maxsize=queue_size)
        self._task = None
        self._stop = asyncio.Event()
        self.written = 0
        self.dropped = 0

    def try_log(self, kind, data):
        try:
            self.queue.put_nowait({"timestamp": format_timestamp(), "kind": kind, "data": data})
        except asyncio.QueueFull:
            self.dropped += 1
            return False
        return True

    def get_stats(self):
        return {"queued": self.queue.qsize(), "written": self.written, "dropped": self.dropped}

    async def start(self):
        if self._task is not None:
            return
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._stop.clear()
        self._task = asyncio.create_task(self._drain())

    async def stop(self):
        """Flush what is queued and close the file."""
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None

    async def _next(self):
        try:
            return await asyncio.wait_for(self.queue.get(), timeout=self.POLL_S)
        except asyncio.TimeoutError:
            return None

    def _append(self, fh, record):
        # The file can be removed by log rotation while we hold it open
        if not os.path.exists(self.path):
            self.dropped += 1
            return False
        fh.write(json.dumps(record, default=str) + "\n")
        self.written += 1
        return True

    async def _drain(self):
        warned = False
        with open(self.path, "a") as fh:
            while not self._stop.is_set():
                record = await self._next()
                if record is None:
                    continue
                try:
                    ok = self._append(fh, record)
                    fh.flush()
                except OSError as exc:
                    ok = False
                    self.dropped += 1
                    get_logger(component="file_logger").warn("Log write failed", error=exc, path=self.path)
                if not ok and not warned:
                    get_logger(component="file_logger").warn("Log file unavailable, dropping records",
                                                              path=self.path)
                    warned = True
            while not self.queue.empty():
                self._append(fh, self.queue.get_nowait())
            fh.flush()
