"""Reusable decorators for tokenizer utilities."""

import time
import functools
import logging
from typing import Callable

log = logging.getLogger(__name__)


def log_elapsed(label: str) -> Callable[[Callable], Callable]:
    """Log execution time of the wrapped callable under ``label``."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            """Call ``func`` and always log elapsed time."""
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            # log execution time even if the decorated function throws error
            finally:
                elapsed = time.perf_counter() - start
                log.info(f"{label} completed in {elapsed:.3f} s")

        return wrapper

    return decorator
