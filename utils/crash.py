"""Crash reporting for uncaught exceptions in the host process."""

import json
import os
import sys
import traceback

from utils.ksuid import generate_ksuid
from utils.timestamp import format_timestamp

_crash_log = "logs/crash.log"


def configure(crash_file):
    global _crash_log
    _crash_log = crash_file


def build_record(exc, tb_text=None, context=None):
    """JSON-ready crash record for an exception instance (or None)."""
    record = {
        "id": generate_ksuid(),
        "timestamp": format_timestamp(),
        "type": type(exc).__name__ if exc is not None else "Unknown",
        "msg": str(exc) if exc is not None else "",
        "traceback": tb_text,
    }
    if context:
        record["context"] = context
    return record


def _append(record):
    # Never raises: a failing crash writer must not mask the original crash.
    try:
        log_dir = os.path.dirname(_crash_log)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        with open(_crash_log, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")
    except OSError:
        pass


def log_crash(exc_type, exc_value, exc_tb):
    """sys.excepthook replacement: banner on stderr plus a crash record."""
    tb_text = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    record = build_record(exc_value, tb_text)
    sys.stderr.write(f"\nCRASH [{record['id']}] {record['timestamp']}\n{tb_text}\n")
    _append(record)
    return record


def create_async_handler(logger=None):
    """Event loop exception handler that records task failures."""
    def handler(loop, context):
        exc = context.get("exception")
        tb_text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)) if exc else None
        record = build_record(exc, tb_text, {"message": context.get("message", ""),
                                             "task": str(context.get("future", ""))})
        if logger:
            logger.error("Async exception", error=record["msg"] or record["context"]["message"],
                         crash_id=record["id"])
        _append(record)
    return handler


def install_crash_handler():
    sys.excepthook = log_crash
