from internal.logging import LogLevel, StructuredLogger, AsyncFileLogger, get_logger

__all__ = [
    "LogLevel",
    "StructuredLogger",
    "AsyncFileLogger",
    "get_logger",
]
