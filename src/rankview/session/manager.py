"""Holder of the single live query session of a view."""

from loguru import logger

from rankview.config.models import SessionConfig
from rankview.config.settings import settings
from rankview.entities.result import ResolvedResult
from rankview.fetch.base import BaseQueryClient

from .callbacks import SessionCallbackHandler
from .session import QuerySession


class SessionManager:
    """Keeps at most one live ``QuerySession`` and replaces it when the query changes.

    Replacing the session is the only form of cancellation: the previous
    session is superseded, so a batch still in flight for it is dropped
    instead of reaching the new one.

    Args:
        client: Query client shared by the sessions
        config: Page size, initial page and retry settings, from the global settings when omitted
        callbacks: Handler attached to every session created
    """

    def __init__(
        self,
        client: BaseQueryClient,
        config: SessionConfig | None = None,
        callbacks: SessionCallbackHandler | None = None,
    ):
        self.client = client
        self.config = config or settings.session_config()
        self.callbacks = callbacks
        self._session: QuerySession | None = None

    @property
    def session(self) -> QuerySession | None:
        return self._session

    def set_query(self, query_text: str) -> QuerySession | None:
        """Return the live session for ``query_text``, replacing the current one if needed.

        A blank query clears the live session.
        """
        query_text = query_text.strip()
        if self._session is not None and self._session.query_text == query_text:
            return self._session

        self._detach()
        if not query_text:
            return None

        self._session = QuerySession(
            query_text,
            self.client,
            page_size=self.config.page_size,
            initial_page=self.config.initial_page,
            retry_config=self.config.retry_config(),
            callbacks=self.callbacks,
        )
        return self._session

    async def ensure_page(self, page: int | None = None) -> list[ResolvedResult]:
        if self._session is None:
            return []
        return await self._session.ensure_page(page)

    def close(self) -> None:
        self._detach()

    def _detach(self) -> None:
        if self._session is not None:
            logger.debug(f"Detaching session {self._session.id}")
            self._session.supersede()
            self._session = None
