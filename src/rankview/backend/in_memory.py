"""Reference in-memory ranking backend.

Streams a query's results as rank deltas. Each request reads the next
slice of chunk hits from a chunk source, aggregates them per file into the
request's cursor, and answers with the changes since the previous request
on that cursor. A request that finds no more chunks ends the stream.

Usage example:
    >>> source = ListChunkSource([ScoredChunk(path="/pics/cat.png", score=0.9)])
    >>> backend = InMemoryRankingBackend(source, chunks_per_query=50)
    >>> response = await backend.query(QueryRequest(query_text="cat"))
"""

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from loguru import logger
from pydantic import BaseModel

from ..config.settings import settings
from ..entities.result import BatchResponse, QueryRequest
from ..errors import CursorNotFoundError, InvalidRequestError
from .cursor import QueryCursor, utcnow
from .delta import compute_changes
from .store import BaseCursorStore, InMemoryCursorStore


class ScoredChunk(BaseModel):
    """One chunk hit produced by a similarity search."""

    path: str
    score: float

    model_config = {"frozen": True}


# (query_text, limit, offset) -> chunk hits, best first
ChunkSource = Callable[[str, int, int], Sequence[ScoredChunk]]


class ListChunkSource:
    """Chunk source serving a fixed list of hits for any query."""

    def __init__(self, chunks: Sequence[ScoredChunk]):
        self.chunks = list(chunks)

    def __call__(self, query_text: str, limit: int, offset: int) -> list[ScoredChunk]:
        return self.chunks[offset:offset + limit]


class InMemoryRankingBackend:
    """Cursor-based delta stream over a chunk source.

    Args:
        chunk_source: Callable returning chunk hits for a query window
        chunks_per_query: Chunks aggregated per request, defaults to settings.CHUNKS_PER_QUERY
        cursor_ttl: Idle lifetime of a cursor, defaults to settings.CURSOR_TTL_SECONDS
        cursor_store: Cursor persistence, in memory by default
        clock: Returns the current time, injectable for tests
    """

    def __init__(
        self,
        chunk_source: ChunkSource,
        chunks_per_query: int | None = None,
        cursor_ttl: timedelta | None = None,
        cursor_store: BaseCursorStore | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        if chunks_per_query is None:
            chunks_per_query = settings.CHUNKS_PER_QUERY
        if cursor_ttl is None:
            cursor_ttl = timedelta(seconds=settings.CURSOR_TTL_SECONDS)
        if chunks_per_query < 1:
            raise ValueError("chunks_per_query must be at least 1")

        self.chunk_source = chunk_source
        self.chunks_per_query = chunks_per_query
        self.cursor_ttl = cursor_ttl
        self.cursor_store = cursor_store if cursor_store is not None else InMemoryCursorStore()
        self.clock = clock

    async def query(self, request: QueryRequest) -> BatchResponse:
        now = self.clock()
        cursor = self._load_cursor(request, now)

        purged = self.cursor_store.clear_expired(now)
        if purged:
            logger.debug(f"Purged {purged} expired cursors")

        previous = cursor.snapshot()
        chunks = self.chunk_source(request.query_text, self.chunks_per_query, cursor.offset)

        if not chunks:
            logger.debug(f"Cursor {cursor.id} exhausted at offset {cursor.offset}")
            self.cursor_store.delete(cursor.id)
            return BatchResponse(total_length=len(previous), changes=[], next_cursor=None)

        for chunk in chunks:
            cursor.aggregate_chunk(chunk.path, chunk.score)

        changes = compute_changes(previous, cursor.ranked())
        cursor.offset += self.chunks_per_query
        cursor.touch(self.cursor_ttl, now)
        self.cursor_store.put(cursor)

        logger.debug(
            f"Cursor {cursor.id}: {len(chunks)} chunks -> "
            f"{len(cursor.aggregate_scores)} files, {len(changes)} changes"
        )
        return BatchResponse(
            total_length=len(cursor.aggregate_scores),
            changes=changes,
            next_cursor=cursor.id,
        )

    def _load_cursor(self, request: QueryRequest, now: datetime) -> QueryCursor:
        if request.cursor is None:
            cursor = QueryCursor.fresh(request.query_text, self.cursor_ttl, now)
            logger.debug(f"Initialized new cursor with id: {cursor.id}")
            return cursor

        cursor = self.cursor_store.get(request.cursor)
        if cursor is None or cursor.is_expired(now):
            raise CursorNotFoundError(request.cursor)
        if cursor.query_text != request.query_text:
            raise InvalidRequestError(
                "Cursor belongs to a different query",
                details={"cursor": request.cursor, "query": request.query_text},
            )
        return cursor
