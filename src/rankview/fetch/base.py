"""Base query client interface."""

from abc import ABC, abstractmethod

from rankview.entities.result import BatchResponse, QueryRequest


class BaseQueryClient(ABC):
    """Abstract client for the cursor-based query contract.

    One call fetches one batch: the caller passes the cursor returned by
    the previous batch (None to start the stream) and receives the new
    list length, the rank changes, and the next cursor (None once the
    stream is exhausted).

    Implementations raise ``rankview.errors.QueryError`` subclasses for
    transport and backend failures.
    """

    @abstractmethod
    async def query(self, request: QueryRequest) -> BatchResponse:
        """Fetch the next batch for ``request.query_text`` after ``request.cursor``."""
        pass

    async def aclose(self) -> None:
        """Release any resources held by the client."""
        return None
