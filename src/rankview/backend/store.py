from abc import ABC, abstractmethod
from datetime import datetime

from .cursor import QueryCursor, utcnow


class BaseCursorStore(ABC):
    """
    Abstract Base Class for cursor stores.
    Keeps the aggregation state of every live query stream.
    """

    @abstractmethod
    def get(self, cursor_id: str) -> QueryCursor | None:
        """Get a cursor by id."""
        pass

    @abstractmethod
    def put(self, cursor: QueryCursor) -> None:
        """Insert or replace a cursor."""
        pass

    @abstractmethod
    def delete(self, cursor_id: str) -> None:
        """Delete a cursor if present."""
        pass

    @abstractmethod
    def clear_expired(self, now: datetime | None = None) -> int:
        """Drop expired cursors, returning how many were removed."""
        pass


class InMemoryCursorStore(BaseCursorStore):
    """
    Simple In-Memory cursor store.
    Not persistent.
    """

    def __init__(self):
        self._store: dict[str, QueryCursor] = {}

    def __len__(self) -> int:
        return len(self._store)

    def get(self, cursor_id: str) -> QueryCursor | None:
        return self._store.get(cursor_id)

    def put(self, cursor: QueryCursor) -> None:
        self._store[cursor.id] = cursor

    def delete(self, cursor_id: str) -> None:
        self._store.pop(cursor_id, None)

    def clear_expired(self, now: datetime | None = None) -> int:
        now = now or utcnow()
        expired = [cid for cid, cursor in self._store.items() if cursor.is_expired(now)]
        for cid in expired:
            del self._store[cid]
        return len(expired)
