"""Cursor-driven fetch loop.

Keeps requesting batches for a session until it holds enough results or
the backend reports the end of the stream. Requests for one session are
strictly sequential: each request carries the cursor returned by the
previous response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from rankview.errors import MalformedBatchError, QueryError
from rankview.utils.retry import RetryConfig, execute_with_retry

if TYPE_CHECKING:
    from rankview.session.session import QuerySession


async def fill(
    session: QuerySession,
    target_count: int,
    retry_config: RetryConfig | None = None,
) -> bool:
    """Load batches into ``session`` until it holds ``target_count`` results.

    Only one fill runs per session at a time. A call made while another is
    in flight returns immediately, but its target is recorded, so the running
    loop keeps going until the larger target is met.

    A failed request aborts the fill and leaves the session as it was, so a
    later call can try again. A batch arriving after the session was
    superseded is dropped.

    Args:
        session: Session to fill
        target_count: Number of results wanted
        retry_config: Retry policy, defaults to the session's

    Returns:
        True if at least one batch was applied

    Raises:
        MalformedBatchError: If the backend sent a batch that cannot be merged
    """
    session.request_length(target_count)

    if not session.needs_more():
        return False
    if not session.begin_fill():
        logger.debug(f"Session {session.id}: fill already in flight, target raised to {target_count}")
        return False

    retry_config = retry_config or session.retry_config
    applied = 0
    try:
        while session.needs_more():
            request = session.next_request()
            try:
                response = await execute_with_retry(session.client.query, request, config=retry_config)
            except QueryError as e:
                logger.warning(
                    f"Session {session.id}: fill aborted after {applied} batches: {type(e).__name__}: {e}"
                )
                session.record_error(e)
                break

            if session.superseded:
                logger.debug(f"Session {session.id}: dropping batch received after supersession")
                break

            try:
                session.apply_batch(response)
            except MalformedBatchError as e:
                logger.error(f"Session {session.id}: rejected malformed batch: {e}")
                session.record_error(e)
                raise
            applied += 1
    finally:
        session.end_fill()

    return applied > 0
