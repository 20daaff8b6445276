"""
Structured logging for jobboard.

Log lines carry their context as a JSON suffix. The logger also keeps
per-statement counters (SELECT, INSERT, ...) that the executor feeds, so a
CLI run or a test can report how the store behaved.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

LINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_LINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LINE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"jobboard_{datetime.now().strftime('%Y%m%d')}.log"
    handler = logging.FileHandler(log_file, encoding="utf-8")
    # files get everything, the level only filters the console
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=FILE_LINE_FORMAT, datefmt=DATE_FORMAT))
    return handler


class QueryMetrics:
    """Counts statements by kind and failures by error type."""

    def __init__(self):
        self.executed = 0
        self.failed = 0
        self.errors_by_type: Dict[str, int] = {}
        self.operations: Dict[str, Dict[str, int]] = {}

    def _stats(self, operation: str) -> Dict[str, int]:
        return self.operations.setdefault(operation, {"attempts": 0, "successes": 0})

    def success(self, operation: str):
        self.executed += 1
        stats = self._stats(operation)
        stats["attempts"] += 1
        stats["successes"] += 1

    def failure(self, operation: str, error_type: str):
        self.failed += 1
        self._stats(operation)["attempts"] += 1
        self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

    def snapshot(self) -> Dict[str, Any]:
        operations = {}
        for operation, stats in self.operations.items():
            operations[operation] = dict(
                stats, success_rate=round(stats["successes"] / stats["attempts"], 3)
            )
        return {
            "queries_executed": self.executed,
            "queries_failed": self.failed,
            "errors_by_type": dict(self.errors_by_type),
            "operations": operations,
        }


class StructuredLogger:
    """
    Logger with console and optional file output plus query metrics.

    Args:
        name: Logger name
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_dir: Directory for a dated log file; no file is written without it
        enable_console: Echo to stdout (the CLI only does this with --verbose)
    """

    def __init__(
        self,
        name: str = "jobboard",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_console: bool = True,
    ):
        numeric_level = getattr(logging, level.upper())
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if log_dir is not None else numeric_level)
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if enable_console:
            self.logger.addHandler(_console_handler(numeric_level))
        if log_dir is not None:
            self.logger.addHandler(_file_handler(Path(log_dir)))

        self.metrics = QueryMetrics()

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, context)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    def record_query(self, operation: str):
        """Count a statement that completed."""
        self.metrics.success(operation)

    def record_query_failure(self, operation: str, error_type: str):
        """Count a statement the store rejected."""
        self.metrics.failure(operation, error_type)

    def get_metrics(self) -> Dict[str, Any]:
        """Counters plus a success_rate per statement kind."""
        return self.metrics.snapshot()

    def log_metrics_summary(self):
        metrics = self.get_metrics()
        executed = metrics["queries_executed"]
        total = executed + metrics["queries_failed"]
        overall = round(executed / total * 100, 1) if total else 0

        self.info("=== Store Session Metrics ===")
        self.info(f"Queries: {executed}/{total} ({overall}% success)")
        for operation, stats in metrics["operations"].items():
            rate = stats["success_rate"] * 100
            self.info(f"  {operation}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")
        for error_type, count in metrics["errors_by_type"].items():
            self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "jobboard", level: str = "INFO", **kwargs) -> StructuredLogger:
    """Return the shared logger, creating it with these arguments on first use."""
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Drop the shared logger so the next get_logger builds a fresh one."""
    global _global_logger
    _global_logger = None
