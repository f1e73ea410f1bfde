"""Logging configuration for meshcost"""

import json
import logging
import logging.handlers
import sys
import time
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class StructuredFormatter(logging.Formatter):
    """JSON structured logging formatter"""

    EXTRA_FIELDS = ('workload', 'locality', 'tier', 'operation', 'duration', 'endpoint')

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread_name": record.threadName,
        }

        for name in self.EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        return json.dumps(log_data, default=str)


class PerformanceLogger:
    """Logger for pipeline stage timings"""

    def __init__(self):
        self.logger = logging.getLogger('meshcost.performance')

    @contextmanager
    def timer(self, operation: str, **kwargs):
        """Context manager to time operations"""
        start = time.monotonic()
        try:
            yield
        finally:
            duration = time.monotonic() - start
            self.logger.debug(
                f"Performance: {operation} completed in {duration:.3f}s",
                extra={'operation': operation, 'duration': duration, **kwargs}
            )


def _formatter(structured: bool, fmt: str) -> logging.Formatter:
    if structured:
        return StructuredFormatter()
    return logging.Formatter(fmt)


def setup_logging(level: str = "INFO",
                  log_file: Optional[Path] = None,
                  structured: bool = False,
                  console: bool = True,
                  fmt: str = DEFAULT_FORMAT):
    """Setup application-wide logging configuration"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    root_logger.handlers = []

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(_formatter(structured, fmt))
        root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(_formatter(structured, fmt))
        root_logger.addHandler(file_handler)

    # Configure third-party loggers
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


_performance_logger = PerformanceLogger()


def get_performance_logger() -> PerformanceLogger:
    """Get performance logger instance"""
    return _performance_logger
