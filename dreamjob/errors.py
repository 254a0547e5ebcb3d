"""
Exception types raised by dreamjob.

Absence (unknown id, unknown email, duplicate email on registration) is
reported through return values, never through exceptions. Only failures
below the repository contract surface as ``StoreFault``.
"""

from typing import Optional


class DreamjobError(Exception):
    """Base class for all dreamjob errors."""
    pass


class ConfigError(DreamjobError):
    """Raised when a configuration value cannot be used."""
    pass


class StoreFault(DreamjobError):
    """
    Raised when the underlying store is unavailable or rejects a statement.

    The original driver/ORM exception is kept as ``__cause__``.
    """

    def __init__(self, operation: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.cause = cause
