"""Decorator utilities for cross-cutting concerns."""
import functools
import logging
import time
from typing import Any, Callable, Optional, TypeVar, cast

F = TypeVar('F', bound=Callable[..., Any])


def log_execution_time(func: Optional[F] = None, *, logger_name: Optional[str] = None):
    """Decorator to log how long a call took.

    Usable bare (``@log_execution_time``) or with the logger to report to
    (``@log_execution_time(logger_name=__name__)``). Failures are logged with
    the elapsed time and re-raised unchanged.
    """
    def decorator(inner: F) -> F:
        timing_logger = logging.getLogger(logger_name or inner.__module__)

        @functools.wraps(inner)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = inner(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - started
                timing_logger.error(f"{inner.__qualname__} failed after {elapsed:.2f}s: {type(e).__name__}")
                raise
            timing_logger.info(f"{inner.__qualname__} completed in {time.perf_counter() - started:.2f}s")
            return result

        return cast(F, wrapper)

    if func is not None:
        return decorator(func)
    return decorator
