"""Timing helpers for the codec stages."""

import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from loguru import logger

P = ParamSpec("P")
R = TypeVar("R")


def timed(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to measure and log execution time of a pipeline stage.

    Logs the function name and elapsed milliseconds at INFO level, also when
    the stage raises.

    Usage:
        @timed
        def resample(image, width, height):
            ...
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start_time) * 1000.0
            logger.info(f"[PROFILE] {func.__qualname__} took {elapsed_ms:.1f}ms")

    return wrapper
