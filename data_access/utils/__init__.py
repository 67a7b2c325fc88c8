"""
Utilities package for the data-access library.

Exports shared helpers for logging, tracing, and other cross-cutting concerns.
Keep this package lightweight and free of backend-specific logic.
"""

from data_access.utils.logging import configure_logging, get_logger
from data_access.utils.tracing import TraceStats, trace_block, traced

__all__ = [
    "configure_logging",
    "get_logger",
    "TraceStats",
    "trace_block",
    "traced",
]
