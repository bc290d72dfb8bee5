"""Timing helpers for merge and fetch diagnostics."""

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from loguru import logger


@dataclass
class Timing:
    """Elapsed time of one timed block, filled in when the block exits."""

    operation: str
    elapsed_ms: float = 0.0


@contextmanager
def timer(operation: str, log_level: str = "DEBUG", threshold_ms: float = 0) -> Iterator[Timing]:
    """Time a block and log it when it is slower than ``threshold_ms``.

    The yielded ``Timing`` carries the elapsed time once the block has
    exited, also when it raised.

    Example:
        >>> with timer("Merge of 12 changes") as timing:
        ...     merged = merge(current, response.total_length, response.changes)
        >>> timing.elapsed_ms
    """
    timing = Timing(operation)
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing.elapsed_ms = (time.perf_counter() - start) * 1000
        if timing.elapsed_ms >= threshold_ms:
            logger.log(log_level.upper(), f"{operation} took {timing.elapsed_ms:.2f}ms")
