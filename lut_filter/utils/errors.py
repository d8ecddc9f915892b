# Centralized error handling utilities
"""
Provides consistent error handling patterns across the filter engine.

This module defines:
- Custom exception classes for the different error categories
- The fatal LUT errors raised by the cube builder
- A helper for logging conditions that are recovered from
"""

from typing import Optional
from enum import Enum

from .logger import get_logger

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for consistent handling."""
    RECOVERABLE = "recoverable"      # Can continue with fallback
    USER_INPUT = "user_input"        # Invalid caller input
    PROCESSING = "processing"        # Image processing errors
    GPU = "gpu"                      # GPU-related errors
    CONFIGURATION = "configuration"  # Settings/config errors
    FATAL = "fatal"                  # Unrecoverable errors


class AppError(Exception):
    """Base exception for filter engine errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.RECOVERABLE,
        original_error: Optional[Exception] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.category = category
        self.original_error = original_error
        self.user_message = user_message or message

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.args[0]} (caused by: {type(self.original_error).__name__})"
        return self.args[0]


class ProcessingError(AppError):
    """Image processing errors."""

    def __init__(self, message: str, step: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", ErrorCategory.PROCESSING)
        super().__init__(message, **kwargs)
        self.step = step


class GPUError(AppError):
    """GPU-related errors."""

    def __init__(self, message: str, fallback_available: bool = True, **kwargs):
        super().__init__(message, category=ErrorCategory.GPU, **kwargs)
        self.fallback_available = fallback_available


class ConfigurationError(AppError):
    """Configuration/settings errors."""

    def __init__(self, message: str, setting_name: Optional[str] = None, **kwargs):
        super().__init__(message, category=ErrorCategory.CONFIGURATION, **kwargs)
        self.setting_name = setting_name


class InvalidDimensionError(ProcessingError):
    """LUT dimension below 2. No cube can be produced."""

    def __init__(self, dimension: int, filter_id: Optional[str] = None):
        where = f" for filter '{filter_id}'" if filter_id else ""
        super().__init__(
            f"Invalid LUT dimension {dimension}{where}: must be at least 2",
            step="build_lut_cube",
            category=ErrorCategory.FATAL,
        )
        self.dimension = dimension
        self.filter_id = filter_id


class LutSizeMismatchError(ProcessingError):
    """Reference image does not hold exactly N^3 pixels (raised only in strict mode)."""

    def __init__(
        self,
        expected: int,
        actual: int,
        dimension: int,
        filter_id: Optional[str] = None,
    ):
        where = f" for filter '{filter_id}'" if filter_id else ""
        super().__init__(
            f"LUT reference image{where} has {actual} pixels, "
            f"expected {expected} for dimension {dimension}",
            step="build_lut_cube",
            category=ErrorCategory.FATAL,
        )
        self.expected = expected
        self.actual = actual
        self.dimension = dimension
        self.filter_id = filter_id


def log_and_continue(
    message: str,
    category: ErrorCategory = ErrorCategory.RECOVERABLE,
    level: str = "warning",
) -> None:
    """
    Log an error and continue execution.

    Use this for non-critical conditions that shouldn't stop processing.

    Args:
        message: Error message to log.
        category: Error category for context.
        level: Log level.
    """
    log_func = getattr(logger, level, logger.warning)
    log_func("[%s] %s", category.value, message)
