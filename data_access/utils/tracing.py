"""
Tracing utilities for the data-access library.

Every facade operation runs inside ``trace_block`` via the ``traced``
decorator. A trace records wall-clock duration (perf_counter), the outcome
and the error type if any, and is emitted through the logging pipeline so a
JSON log collector can meter operations per table.

Usage examples:
    from data_access.utils.tracing import trace_block, traced

    with trace_block("scan", table="countries") as stats:
        run_scan()
    print(stats.duration_seconds, stats.outcome)

    class Service:
        trace_tags = {"service": "data-access-library"}

        @traced()
        async def search(self, table, criteria):
            ...
"""

from __future__ import annotations

import contextlib
import functools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generator, Optional, TypeVar

from data_access.utils.logging import get_logger

log = get_logger("data_access.trace")

T = TypeVar("T")


@dataclass
class TraceStats:
    """
    Container for one traced call.
    """

    operation: str
    tags: Dict[str, Any] = field(default_factory=dict)
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    outcome: str = field(default="ok")
    error_type: Optional[str] = field(default=None)


@contextlib.contextmanager
def trace_block(
    operation: str, logger: Optional[logging.Logger] = None, **tags: Any
) -> Generator[TraceStats, None, None]:
    """
    Context manager timing a block of code and logging its outcome.

    Exceptions raised inside the block, cancellation included, are recorded
    on the stats and re-raised unchanged.

    Parameters
    ----------
    operation : str
        Name of the traced operation (e.g. "search", "get_by_id").
    logger : logging.Logger, optional
        Logger to emit to. Defaults to the ``data_access.trace`` logger.
    **tags : Any
        Extra key/values attached to every log line (service, version, table).
    """
    logger = logger or log
    stats = TraceStats(operation=operation, tags=dict(tags))
    logger.debug("%s started", operation, extra={"operation": operation, **stats.tags})

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    except BaseException as exc:
        stats.outcome = "error"
        stats.error_type = type(exc).__name__
        raise
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts
        extra = {
            "operation": operation,
            "outcome": stats.outcome,
            "duration_ms": round(stats.duration_seconds * 1000, 3),
            **stats.tags,
        }
        if stats.error_type:
            extra["error_type"] = stats.error_type
            logger.warning(
                "%s failed with %s after %.2f ms",
                operation,
                stats.error_type,
                extra["duration_ms"],
                extra=extra,
            )
        else:
            logger.debug(
                "%s finished in %.2f ms", operation, extra["duration_ms"], extra=extra
            )


def _table_tag(target: Any) -> Optional[str]:
    """Resolve the table name from a table-name argument or a record instance."""
    if isinstance(target, str):
        return target
    meta = getattr(target, "Meta", None)
    return getattr(meta, "table_name", None)


def traced(
    operation: Optional[str] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator tracing an async method.

    The owning object may expose ``trace_tags`` (a dict) whose entries are
    attached to every trace. The first positional argument is inspected for a
    table name: either the name itself or a record whose model carries
    ``Meta.table_name``.

    Example
    -------
        @traced("remove")
        async def delete(self, record):
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        name = operation or func.__name__

        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
            tags: Dict[str, Any] = dict(getattr(self, "trace_tags", None) or {})
            table = _table_tag(args[0]) if args else None
            if table is not None:
                tags["table"] = table
            with trace_block(name, **tags):
                return await func(self, *args, **kwargs)

        return wrapper

    return decorator


__all__ = ["TraceStats", "trace_block", "traced"]
