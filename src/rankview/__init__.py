"""
RankView - client-side views over progressively delivered ranked results.

A ranking service streams a query's results as batches of rank changes
addressed by an opaque cursor. RankView folds those batches into a settled
ranked list and exposes it to a UI as fixed-size pages, fetching more only
when a page needs it.
"""

__version__ = "0.1.0"

# Entities
from .entities import BatchResponse, ChangeRecord, QueryRequest, ResolvedResult

# Errors
from .errors import MalformedBatchError, QueryError, RankViewError

# Query clients and fetch loop
from .fetch import BaseQueryClient, HttpQueryClient, InMemoryQueryClient, QueryClientFactory, fill

# Merge engine
from .merge import is_settled, merge

# Sessions
from .session import (
    QuerySession,
    SessionCallbackHandler,
    SessionCallbackManager,
    SessionManager,
    SessionState,
)

__all__ = [
    # Version
    "__version__",
    # Entities
    "ResolvedResult",
    "ChangeRecord",
    "BatchResponse",
    "QueryRequest",
    # Errors
    "RankViewError",
    "QueryError",
    "MalformedBatchError",
    # Merge
    "merge",
    "is_settled",
    # Fetch
    "BaseQueryClient",
    "HttpQueryClient",
    "InMemoryQueryClient",
    "QueryClientFactory",
    "fill",
    # Sessions
    "QuerySession",
    "SessionState",
    "SessionManager",
    "SessionCallbackHandler",
    "SessionCallbackManager",
]
