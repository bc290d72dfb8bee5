"""Change notifications for query sessions.

A view registers a handler to learn when it should re-read a session's
window, loading flag or pagination bounds.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from rankview.entities.result import BatchResponse

    from .session import QuerySession


class SessionCallbackHandler:
    """Base callback handler for session events. Override what you need."""

    def on_fill_start(self, session: QuerySession) -> Any:
        """Run when a fill starts and the session becomes busy."""
        pass

    def on_batch_applied(self, session: QuerySession, response: BatchResponse) -> Any:
        """Run after a batch has been merged into the session's list."""
        pass

    def on_fill_end(self, session: QuerySession) -> Any:
        """Run when a fill ends, whether it completed or was aborted."""
        pass

    def on_page_change(self, session: QuerySession, page: int) -> Any:
        """Run when the current page changes."""
        pass

    def on_exhausted(self, session: QuerySession) -> Any:
        """Run when the backend reports the end of the result stream."""
        pass

    def on_error(self, session: QuerySession, error: Exception) -> Any:
        """Run when a fill is aborted by an error."""
        pass


class SessionCallbackManager(SessionCallbackHandler):
    """Callback Manager that dispatches to a list of handlers.

    A failing handler is logged and skipped so it can never break a fill.
    """

    def __init__(self, handlers: list[SessionCallbackHandler] | None = None):
        self.handlers = list(handlers or [])

    def add_handler(self, handler: SessionCallbackHandler):
        self.handlers.append(handler)

    def remove_handler(self, handler: SessionCallbackHandler):
        if handler in self.handlers:
            self.handlers.remove(handler)

    def _dispatch(self, event: str, *args: Any) -> None:
        for handler in self.handlers:
            try:
                getattr(handler, event)(*args)
            except Exception as e:
                logger.error(f"Error in callback handler {handler} during {event}: {e}")

    def on_fill_start(self, session: QuerySession) -> Any:
        self._dispatch("on_fill_start", session)

    def on_batch_applied(self, session: QuerySession, response: BatchResponse) -> Any:
        self._dispatch("on_batch_applied", session, response)

    def on_fill_end(self, session: QuerySession) -> Any:
        self._dispatch("on_fill_end", session)

    def on_page_change(self, session: QuerySession, page: int) -> Any:
        self._dispatch("on_page_change", session, page)

    def on_exhausted(self, session: QuerySession) -> Any:
        self._dispatch("on_exhausted", session)

    def on_error(self, session: QuerySession, error: Exception) -> Any:
        self._dispatch("on_error", session, error)
