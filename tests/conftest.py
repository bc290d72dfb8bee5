"""Pytest configuration and global fixtures for RankView tests."""

from pathlib import Path

import pytest

from rankview.backend import InMemoryRankingBackend, ListChunkSource
from rankview.fetch import InMemoryQueryClient

# Import shared fixtures
from tests.fixtures.common import (  # noqa: F401
    abc_results,
    photo_chunks,
    scripted_client,
)


# ==================== Component Fixtures ====================

@pytest.fixture
def photo_backend(photo_chunks):
    """Reference backend serving the photo chunk hits two chunks at a time."""
    return InMemoryRankingBackend(ListChunkSource(photo_chunks), chunks_per_query=2)


@pytest.fixture
def photo_client(photo_backend):
    return InMemoryQueryClient(photo_backend)


# ==================== Pytest Configuration ====================

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    for item in items:
        rel_path = Path(item.path).relative_to(Path(__file__).parent)
        if "unit" in rel_path.parts:
            item.add_marker(pytest.mark.unit)
        elif "integration" in rel_path.parts:
            item.add_marker(pytest.mark.integration)
