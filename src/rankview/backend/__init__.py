"""Reference implementation of the cursor-based delta stream.

Used by examples and tests in place of a real ranking service.
"""

from .cursor import AggregateScore, QueryCursor
from .delta import compute_changes
from .in_memory import ChunkSource, InMemoryRankingBackend, ListChunkSource, ScoredChunk
from .store import BaseCursorStore, InMemoryCursorStore

__all__ = [
    "AggregateScore",
    "BaseCursorStore",
    "ChunkSource",
    "InMemoryCursorStore",
    "InMemoryRankingBackend",
    "ListChunkSource",
    "QueryCursor",
    "ScoredChunk",
    "compute_changes",
]
