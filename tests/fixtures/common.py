"""Shared test fixtures for all test types."""

import pytest

from rankview.backend import ScoredChunk
from tests.utils.builders import ScriptedQueryClient, settled


@pytest.fixture
def abc_results():
    """Settled list [A@1, B@2, C@3]."""
    return settled("A", "B", "C")


@pytest.fixture
def scripted_client():
    return ScriptedQueryClient()


@pytest.fixture
def photo_chunks() -> list[ScoredChunk]:
    """Chunk hits, best first, where later chunks reshuffle earlier files."""
    return [
        ScoredChunk(path="/pics/cat.png", score=0.90),
        ScoredChunk(path="/pics/dog.png", score=0.89),
        ScoredChunk(path="/docs/pets.pdf", score=0.70),
        ScoredChunk(path="/pics/dog.png", score=0.60),
        ScoredChunk(path="/pics/dog.png", score=0.55),
        ScoredChunk(path="/docs/vet.md", score=0.50),
        ScoredChunk(path="/pics/bird.jpg", score=0.40),
        ScoredChunk(path="/docs/pets.pdf", score=0.35),
        ScoredChunk(path="/pics/fish.gif", score=0.30),
    ]
