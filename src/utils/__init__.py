"""Utility modules for the station climate pipeline."""

from src.utils.retry import (
    create_retry_decorator,
    is_transient_error,
    isd_retry,
)

__all__ = [
    "create_retry_decorator",
    "is_transient_error",
    "isd_retry",
]
