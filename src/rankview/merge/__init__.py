"""Rank-merge engine."""

from .engine import is_settled, merge

__all__ = ["merge", "is_settled"]
