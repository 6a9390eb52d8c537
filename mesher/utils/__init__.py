"""Utility functions for Mesher."""

from mesher.utils.logging import (
    StructuredLogger,
    get_logger,
    log_mesher_result,
    log_performance,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_performance",
    "log_mesher_result",
    "StructuredLogger",
]
