"""Query client providers."""

from .http import HttpQueryClient
from .in_memory import InMemoryQueryClient

__all__ = ["HttpQueryClient", "InMemoryQueryClient"]
