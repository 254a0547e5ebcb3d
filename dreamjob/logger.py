"""
Structured logging for dreamjob.

Provides centralized logging with console and file outputs, plus
counters for repository activity (writes, duplicates, store faults).
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks repository metrics; safe to share between request threads.
    """

    def __init__(
        self,
        name: str = "dreamjob",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        self._metrics_lock = threading.Lock()
        self.metrics = {
            "saves": 0,
            "updates": 0,
            "deletes": 0,
            "duplicates": 0,
            "store_faults": 0,
            "faults_by_operation": {},
        }

        # Console handler
        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        # File handler
        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"dreamjob_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_save(self):
        with self._metrics_lock:
            self.metrics["saves"] += 1

    def record_update(self):
        with self._metrics_lock:
            self.metrics["updates"] += 1

    def record_delete(self):
        with self._metrics_lock:
            self.metrics["deletes"] += 1

    def record_duplicate(self):
        """Record a write rejected by a uniqueness constraint."""
        with self._metrics_lock:
            self.metrics["duplicates"] += 1

    def record_store_fault(self, operation: str):
        """Record a storage failure for the given repository operation."""
        with self._metrics_lock:
            self.metrics["store_faults"] += 1
            faults = self.metrics["faults_by_operation"]
            faults[operation] = faults.get(operation, 0) + 1

    def get_metrics(self) -> dict:
        """Return a copy of current metrics."""
        with self._metrics_lock:
            metrics_copy = dict(self.metrics)
            metrics_copy["faults_by_operation"] = dict(self.metrics["faults_by_operation"])
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Repository Metrics ===")
        self.info(f"Saves: {metrics['saves']}")
        self.info(f"Updates: {metrics['updates']}")
        self.info(f"Deletes: {metrics['deletes']}")
        self.info(f"Duplicates rejected: {metrics['duplicates']}")
        self.info(f"Store faults: {metrics['store_faults']}")

        if metrics["faults_by_operation"]:
            self.info("Faults by operation:")
            for operation, count in metrics["faults_by_operation"].items():
                self.info(f"  {operation}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "dreamjob",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
