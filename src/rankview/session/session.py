"""Query session: one query's ranked list, cursor and pagination state."""

import math
from enum import Enum
from uuid import uuid4

from loguru import logger

from rankview.entities.result import BatchResponse, QueryRequest, ResolvedResult
from rankview.fetch.base import BaseQueryClient
from rankview.fetch.loop import fill as run_fill
from rankview.merge.engine import merge
from rankview.utils.performance import timer
from rankview.utils.retry import RetryConfig

from .callbacks import SessionCallbackHandler, SessionCallbackManager


class SessionState(str, Enum):
    """Lifecycle of a query session."""
    IDLE = "idle"
    FILLING = "filling"
    EXHAUSTED = "exhausted"


class QuerySession:
    """Client-side view of one query's progressively delivered results.

    The session owns the ranked list. The list is only ever replaced as a
    whole after a batch has been merged, so readers never observe a
    half-applied batch. Pages are 1-based windows of ``page_size`` results.

    A session is never reset: when the query text changes the caller
    creates a new session and calls ``supersede()`` on the old one.

    Args:
        query_text: Query this session streams results for
        client: Query client used to fetch batches
        page_size: Number of results per page
        initial_page: Page to start on
        retry_config: Retry policy for query requests (single attempt by default)
        callbacks: Handler notified of session events

    Example:
        >>> session = QuerySession("holiday photos", client, page_size=20)
        >>> await session.ensure_page(1)
        >>> [r.name for r in session.results]
    """

    def __init__(
        self,
        query_text: str,
        client: BaseQueryClient,
        page_size: int = 20,
        initial_page: int = 1,
        *,
        retry_config: RetryConfig | None = None,
        callbacks: SessionCallbackHandler | None = None,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        if initial_page < 1:
            raise ValueError("initial_page must be at least 1")

        self.id = uuid4().hex[:8]
        self.query_text = query_text
        self.client = client
        self.page_size = page_size
        self.retry_config = retry_config
        self.callbacks = callbacks or SessionCallbackManager()
        self.last_error: Exception | None = None
        self.last_merge_ms: float | None = None

        self._page = initial_page
        self._results: list[ResolvedResult] = []
        self._cursor: str | None = None
        self._has_more = True
        self._max_pages: int | None = None
        self._loading = False
        self._superseded = False
        self._wanted = 0

        logger.info(f"Session {self.id} created for query '{query_text[:50]}' (page_size={page_size})")

    # ==================== Status ====================

    @property
    def state(self) -> SessionState:
        if self._loading:
            return SessionState.FILLING
        if not self._has_more:
            return SessionState.EXHAUSTED
        return SessionState.IDLE

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def max_pages(self) -> int | None:
        """Number of pages, None until the result stream is exhausted."""
        return self._max_pages

    @property
    def current_page(self) -> int:
        return self._page

    @property
    def cursor(self) -> str | None:
        return self._cursor

    @property
    def superseded(self) -> bool:
        return self._superseded

    @property
    def total_length(self) -> int:
        return len(self._results)

    @property
    def results(self) -> list[ResolvedResult]:
        """The window of results for the current page."""
        start = (self._page - 1) * self.page_size
        return self._results[start:start + self.page_size]

    @property
    def all_results(self) -> list[ResolvedResult]:
        return list(self._results)

    # ==================== Pagination ====================

    def set_page(self, page: int) -> int:
        """Move to ``page``, clamped to the known page range.

        Before the stream is exhausted only the lower bound applies.
        """
        page = max(1, page)
        if self._max_pages is not None:
            page = min(page, max(1, self._max_pages))
        self._change_page(page)
        return self._page

    def next_page(self) -> int:
        if self._max_pages is None or self._page + 1 <= self._max_pages:
            self._change_page(self._page + 1)
        return self._page

    def previous_page(self) -> int:
        if self._page > 1:
            self._change_page(self._page - 1)
        return self._page

    async def ensure_page(self, page: int | None = None) -> list[ResolvedResult]:
        """Make sure the results of ``page`` (default: current page) are loaded.

        Safe to call any number of times; it only fetches while the list is
        shorter than the page requires and the stream is not exhausted.

        Returns:
            The window for the current page once loading stops
        """
        if page is not None:
            self.set_page(page)
        await self.fill(self._page * self.page_size)
        return self.results

    async def fill(self, target_count: int) -> bool:
        """Fetch batches until ``target_count`` results are loaded."""
        return await run_fill(self, target_count)

    def supersede(self) -> None:
        """Detach this session; later fills are no-ops and late batches are dropped."""
        if not self._superseded:
            self._superseded = True
            logger.info(f"Session {self.id} superseded")

    # ==================== Fetch loop hooks ====================

    def request_length(self, target_count: int) -> int:
        """Set the number of results the next fill loads.

        While a fill is in flight the target can only grow, so a larger page
        requested meanwhile is covered by the running fill.
        """
        if self._loading:
            self._wanted = max(self._wanted, target_count)
        else:
            self._wanted = target_count
        return self._wanted

    def needs_more(self) -> bool:
        return not self._superseded and self._has_more and len(self._results) < self._wanted

    def begin_fill(self) -> bool:
        """Take the single-flight slot. Returns False if it is already taken."""
        if self._loading or self._superseded:
            return False
        self._loading = True
        self.callbacks.on_fill_start(self)
        return True

    def end_fill(self) -> None:
        """Release the single-flight slot and drop the target carried by this fill."""
        self._loading = False
        self._wanted = 0
        self.callbacks.on_fill_end(self)

    def next_request(self) -> QueryRequest:
        return QueryRequest(query_text=self.query_text, cursor=self._cursor)

    def apply_batch(self, response: BatchResponse) -> None:
        """Merge one batch, then publish the new list and advance the cursor.

        Raises:
            MalformedBatchError: If the batch cannot be merged. The list and
                cursor are left as they were.
        """
        with timer(f"Session {self.id} merge of {len(response.changes)} changes") as timing:
            merged = merge(self._results, response.total_length, response.changes)

        self._results = merged
        self.last_merge_ms = timing.elapsed_ms
        self._cursor = response.next_cursor
        self.last_error = None
        self.callbacks.on_batch_applied(self, response)

        if response.is_terminal:
            self._mark_exhausted()

    def record_error(self, error: Exception) -> None:
        self.last_error = error
        self.callbacks.on_error(self, error)

    # ==================== Internals ====================

    def _mark_exhausted(self) -> None:
        self._has_more = False
        self._max_pages = math.ceil(len(self._results) / self.page_size)
        logger.info(
            f"Session {self.id} exhausted: {len(self._results)} results, {self._max_pages} pages"
        )
        if self._page > self._max_pages:
            self._change_page(max(1, self._max_pages))
        self.callbacks.on_exhausted(self)

    def _change_page(self, page: int) -> None:
        if page != self._page:
            self._page = page
            self.callbacks.on_page_change(self, page)

    def __repr__(self) -> str:
        return (
            f"QuerySession(id={self.id!r}, query={self.query_text!r}, state={self.state.value}, "
            f"length={len(self._results)}, page={self._page})"
        )
