"""Cursor state for a query's delta stream."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import uuid4

DEFAULT_CURSOR_TTL = timedelta(minutes=5)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AggregateScore:
    """Chunk hits aggregated for a single file.

    Attributes:
        max_score: Best chunk score seen so far
        num_chunks: Number of chunk hits seen so far
    """

    max_score: float
    num_chunks: int = 1

    def add(self, score: float) -> None:
        self.max_score = max(self.max_score, score)
        self.num_chunks += 1

    @property
    def combined_score(self) -> float:
        # Files matching on many chunks get a small boost
        return self.max_score + 0.01 * self.num_chunks


@dataclass
class QueryCursor:
    """How far one client has consumed the result stream of one query.

    Attributes:
        query_text: Query the cursor was created for
        id: Opaque token handed to the client
        aggregate_scores: File path -> aggregated chunk hits
        offset: Number of chunks consumed from the chunk source
        expires_at: Moment after which the cursor may be purged
    """

    query_text: str
    id: str = field(default_factory=lambda: str(uuid4()))
    aggregate_scores: dict[str, AggregateScore] = field(default_factory=dict)
    offset: int = 0
    expires_at: datetime = field(default_factory=utcnow)

    @classmethod
    def fresh(cls, query_text: str, ttl: timedelta = DEFAULT_CURSOR_TTL, now: datetime | None = None) -> "QueryCursor":
        cursor = cls(query_text=query_text)
        cursor.touch(ttl, now)
        return cursor

    def touch(self, ttl: timedelta = DEFAULT_CURSOR_TTL, now: datetime | None = None) -> "QueryCursor":
        self.expires_at = (now or utcnow()) + ttl
        return self

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at < (now or utcnow())

    def aggregate_chunk(self, path: str, score: float) -> "QueryCursor":
        existing = self.aggregate_scores.get(path)
        if existing is None:
            self.aggregate_scores[path] = AggregateScore(max_score=score)
        else:
            existing.add(score)
        return self

    def ranked(self) -> list[tuple[str, float]]:
        """Paths with their combined scores, best first.

        Ties are broken by path so that ranks are reproducible between calls.
        """
        entries = [(path, agg.combined_score) for path, agg in self.aggregate_scores.items()]
        entries.sort(key=lambda e: (-e[1], e[0]))
        return entries

    def snapshot(self) -> dict[str, tuple[int, float]]:
        """Current ``path -> (rank, combined score)`` for diffing."""
        return {path: (rank, score) for rank, (path, score) in enumerate(self.ranked(), start=1)}
