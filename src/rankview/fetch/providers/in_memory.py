"""In-memory query client backed by the reference ranking backend."""

from loguru import logger

from rankview.backend.in_memory import InMemoryRankingBackend
from rankview.entities.result import BatchResponse, QueryRequest

from ..base import BaseQueryClient


class InMemoryQueryClient(BaseQueryClient):
    """Query client that calls an ``InMemoryRankingBackend`` directly.

    Args:
        backend: The backend to query
    """

    def __init__(self, backend: InMemoryRankingBackend):
        self.backend = backend
        self.request_count = 0

    async def query(self, request: QueryRequest) -> BatchResponse:
        self.request_count += 1
        logger.debug(f"In-memory query #{self.request_count}: '{request.query_text}' cursor={request.cursor}")
        return await self.backend.query(request)
