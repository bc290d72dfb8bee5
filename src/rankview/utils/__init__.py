"""Utility functions for RankView."""

from .performance import timer
from .retry import RetryConfig, execute_with_retry

__all__ = ["RetryConfig", "execute_with_retry", "timer"]
