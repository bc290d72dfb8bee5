"""Tests for performance monitoring utilities."""

import time

import pytest
from loguru import logger

from rankview.session import QuerySession
from rankview.utils.performance import Timing, timer
from tests.utils.builders import batch, insert


@pytest.fixture
def captured_logs():
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


class TestTimer:
    """Tests for timer context manager."""

    def test_timer_yields_elapsed_time(self, captured_logs):
        with timer("Merge of 3 changes") as timing:
            time.sleep(0.001)

        assert isinstance(timing, Timing)
        assert timing.operation == "Merge of 3 changes"
        assert timing.elapsed_ms > 0
        assert any(m.startswith("Merge of 3 changes took") for m in captured_logs)

    def test_timer_with_threshold(self, captured_logs):
        with timer("Fast operation", threshold_ms=10_000) as timing:
            pass

        assert timing.elapsed_ms < 10_000
        assert not any("Fast operation" in m for m in captured_logs)

    def test_timer_records_time_when_block_raises(self, captured_logs):
        with pytest.raises(ValueError):
            with timer("Failing operation") as timing:
                raise ValueError("Test error")

        assert timing.elapsed_ms >= 0
        assert any("Failing operation" in m for m in captured_logs)

    @pytest.mark.parametrize("level", ["debug", "INFO", "WARNING"])
    def test_timer_log_levels(self, level):
        with timer(f"{level} operation", log_level=level):
            pass


class TestSessionMergeTiming:

    @pytest.mark.asyncio
    async def test_session_records_last_merge_duration(self, scripted_client):
        scripted_client.add(batch(1, insert(1, "a"), cursor=None))
        session = QuerySession("q", scripted_client)
        assert session.last_merge_ms is None

        await session.ensure_page()

        assert session.last_merge_ms is not None
        assert session.last_merge_ms >= 0
