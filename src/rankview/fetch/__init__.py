"""Query clients and the cursor-driven fetch loop."""

from .base import BaseQueryClient
from .factory import QueryClientFactory
from .loop import fill
from .providers import HttpQueryClient, InMemoryQueryClient

__all__ = [
    "BaseQueryClient",
    "HttpQueryClient",
    "InMemoryQueryClient",
    "QueryClientFactory",
    "fill",
]
