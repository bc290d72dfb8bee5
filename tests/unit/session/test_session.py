"""Unit tests for QuerySession pagination, exhaustion and error handling."""

import pytest

from rankview.errors import CursorNotFoundError, MalformedBatchError, TransientError
from rankview.session import QuerySession, SessionState
from tests.utils.assertions import assert_settled
from tests.utils.builders import batch, growing_batches, insert, move, names


def make_session(client, page_size=20, initial_page=1, **kwargs) -> QuerySession:
    return QuerySession("pets", client, page_size=page_size, initial_page=initial_page, **kwargs)


class TestConstruction:

    def test_starts_idle_and_empty(self, scripted_client):
        session = make_session(scripted_client)

        assert session.state == SessionState.IDLE
        assert session.results == []
        assert session.current_page == 1
        assert session.has_more
        assert session.max_pages is None
        assert session.cursor is None
        assert not session.is_loading

    @pytest.mark.parametrize("page_size, initial_page", [(0, 1), (20, 0)])
    def test_rejects_invalid_arguments(self, scripted_client, page_size, initial_page):
        with pytest.raises(ValueError):
            make_session(scripted_client, page_size=page_size, initial_page=initial_page)


class TestWindowing:

    @pytest.mark.asyncio
    async def test_pages_over_45_results(self, scripted_client):
        scripted_client.add(*growing_batches(1, 45))
        session = make_session(scripted_client)

        window = await session.ensure_page(2)

        assert [r.rank for r in window] == list(range(21, 41))
        session.set_page(3)
        assert [r.rank for r in session.results] == list(range(41, 46))

    @pytest.mark.asyncio
    async def test_fetches_only_until_page_is_covered(self, scripted_client):
        scripted_client.add(*growing_batches(3, 20))
        session = make_session(scripted_client)

        await session.ensure_page(1)
        await session.ensure_page(1)

        assert len(scripted_client.requests) == 1
        assert session.total_length == 20

    @pytest.mark.asyncio
    async def test_next_request_carries_cursor(self, scripted_client):
        scripted_client.add(*growing_batches(3, 20))
        session = make_session(scripted_client)

        await session.ensure_page(2)

        assert [r.cursor for r in scripted_client.requests] == [None, "cursor-1"]
        assert session.cursor == "cursor-2"

    @pytest.mark.asyncio
    async def test_one_ensure_may_need_several_batches(self, scripted_client):
        scripted_client.add(*growing_batches(4, 5))
        session = make_session(scripted_client, page_size=12)

        await session.ensure_page(1)

        assert len(scripted_client.requests) == 3
        assert len(session.results) == 12
        assert_settled(session.all_results, 15)

    @pytest.mark.asyncio
    async def test_window_reflects_reordering(self, scripted_client):
        scripted_client.add(
            batch(2, insert(1, "a"), insert(2, "b")),
            batch(3, move(1, 2, "a"), move(2, 1, "b"), insert(3, "c"), cursor=None),
        )
        session = make_session(scripted_client, page_size=2)

        await session.ensure_page(1)
        assert names(session.results) == ["a", "b"]

        await session.ensure_page(2)
        session.set_page(1)
        assert names(session.results) == ["b", "a"]


class TestPageNavigation:

    def test_next_page_is_optimistic_before_exhaustion(self, scripted_client):
        session = make_session(scripted_client)

        assert session.next_page() == 2
        assert session.next_page() == 3

    def test_previous_page_stops_at_one(self, scripted_client):
        session = make_session(scripted_client, initial_page=2)

        assert session.previous_page() == 1
        assert session.previous_page() == 1

    def test_set_page_has_lower_bound(self, scripted_client):
        session = make_session(scripted_client)

        assert session.set_page(-4) == 1
        assert session.set_page(9) == 9

    @pytest.mark.asyncio
    async def test_navigation_is_bounded_after_exhaustion(self, scripted_client):
        scripted_client.add(*growing_batches(1, 45))
        session = make_session(scripted_client)
        await session.ensure_page(1)

        assert session.set_page(10) == 3
        assert session.next_page() == 3
        assert session.previous_page() == 2


class TestExhaustion:

    @pytest.mark.asyncio
    async def test_terminal_batch_sets_max_pages(self, scripted_client):
        scripted_client.add(*growing_batches(1, 45))
        session = make_session(scripted_client)

        await session.ensure_page(1)

        assert not session.has_more
        assert session.max_pages == 3
        assert session.state == SessionState.EXHAUSTED
        assert session.cursor is None

    @pytest.mark.asyncio
    async def test_page_is_clamped_on_exhaustion(self, scripted_client):
        scripted_client.add(*growing_batches(1, 45))
        session = make_session(scripted_client, initial_page=5)

        window = await session.ensure_page()

        assert session.current_page == 3
        assert len(window) == 5

    @pytest.mark.asyncio
    async def test_empty_stream_clamps_to_first_page(self, scripted_client):
        scripted_client.add(batch(0, cursor=None))
        session = make_session(scripted_client, initial_page=2)

        window = await session.ensure_page()

        assert window == []
        assert session.max_pages == 0
        assert session.current_page == 1

    @pytest.mark.asyncio
    async def test_no_requests_after_exhaustion(self, scripted_client):
        scripted_client.add(*growing_batches(1, 10))
        session = make_session(scripted_client)

        await session.ensure_page(1)
        await session.ensure_page(5)

        assert len(scripted_client.requests) == 1


class TestFailures:

    @pytest.mark.asyncio
    async def test_transport_failure_keeps_previous_state(self, scripted_client):
        batches = growing_batches(3, 20)
        scripted_client.add(batches[0], TransientError("backend hiccup"))
        session = make_session(scripted_client)

        await session.ensure_page(2)

        assert session.total_length == 20
        assert session.cursor == "cursor-1"
        assert session.has_more
        assert not session.is_loading
        assert isinstance(session.last_error, TransientError)
        assert session.current_page == 2
        assert session.results == []

    @pytest.mark.asyncio
    async def test_failed_deep_page_does_not_leak_into_loaded_page(self, scripted_client):
        batches = growing_batches(6, 20)
        scripted_client.add(batches[0], TransientError("backend hiccup"), *batches[1:])
        session = make_session(scripted_client)
        await session.ensure_page(1)
        await session.ensure_page(5)
        assert len(scripted_client.requests) == 2

        window = await session.ensure_page(1)

        assert len(scripted_client.requests) == 2
        assert session.total_length == 20
        assert len(window) == 20

    @pytest.mark.asyncio
    async def test_finished_fill_target_is_not_reused(self, scripted_client):
        scripted_client.add(*growing_batches(6, 20))
        session = make_session(scripted_client)
        await session.ensure_page(2)
        requests_before = len(scripted_client.requests)

        await session.ensure_page(1)
        await session.ensure_page(2)

        assert len(scripted_client.requests) == requests_before
        assert session.total_length == 40

    @pytest.mark.asyncio
    async def test_later_trigger_retries_after_failure(self, scripted_client):
        batches = growing_batches(3, 20)
        scripted_client.add(batches[0], TransientError("backend hiccup"), batches[1])
        session = make_session(scripted_client)
        await session.ensure_page(2)

        await session.ensure_page(2)

        assert session.total_length == 40
        assert scripted_client.requests[-1].cursor == "cursor-1"
        assert session.last_error is None

    @pytest.mark.asyncio
    async def test_malformed_batch_is_raised_and_not_applied(self, scripted_client):
        scripted_client.add(
            batch(2, insert(1, "a"), insert(2, "b")),
            batch(4, insert(3, "c")),
        )
        session = make_session(scripted_client, page_size=2)
        await session.ensure_page(1)

        with pytest.raises(MalformedBatchError):
            await session.ensure_page(2)

        assert names(session.all_results) == ["a", "b"]
        assert session.cursor == "c"
        assert not session.is_loading
        assert isinstance(session.last_error, MalformedBatchError)

    @pytest.mark.asyncio
    async def test_permanent_error_is_not_retried(self, scripted_client):
        from rankview.utils.retry import RetryConfig

        scripted_client.add(CursorNotFoundError("gone"))
        session = make_session(scripted_client, retry_config=RetryConfig(max_attempts=3, base_delay=0))

        await session.ensure_page(1)

        assert len(scripted_client.requests) == 1
        assert isinstance(session.last_error, CursorNotFoundError)

    @pytest.mark.asyncio
    async def test_retryable_error_is_retried_when_configured(self, scripted_client):
        from rankview.utils.retry import RetryConfig

        scripted_client.add(TransientError("blip"), *growing_batches(1, 5))
        config = RetryConfig(max_attempts=2, base_delay=0, max_delay=0, jitter=0)
        session = make_session(scripted_client, retry_config=config)

        await session.ensure_page(1)

        assert len(scripted_client.requests) == 2
        assert session.total_length == 5
