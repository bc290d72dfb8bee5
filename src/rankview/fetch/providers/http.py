"""HTTP query client - cursor queries against a remote ranking service"""

from __future__ import annotations

import httpx
from loguru import logger

from rankview.entities.result import BatchResponse, QueryRequest
from rankview.errors import (
    ConnectionError,
    QueryError,
    TimeoutError,
    classify_http_error,
    wrap_exception,
)

from ..base import BaseQueryClient


class HttpQueryClient(BaseQueryClient):
    """Query client speaking JSON over HTTP.

    Each batch is a ``POST`` of ``{"query": ..., "cursor_id": ...}`` to the
    query endpoint. The response body carries ``results_len``,
    ``changed_results`` and ``cursor_id`` (or the equivalent
    ``total_length``/``changes``/``next_cursor`` names).

    Args:
        base_url: Base URL of the ranking service
        endpoint: Path of the query endpoint, default '/query'
        timeout: Request timeout in seconds, default 30.0
        headers: Extra headers sent with every request
        transport: Optional httpx transport (used by tests)

    Usage example:
        >>> client = HttpQueryClient(base_url="http://127.0.0.1:8765")
        >>> response = await client.query(QueryRequest(query_text="sunset"))
        >>> await client.aclose()
    """

    def __init__(
        self,
        base_url: str,
        endpoint: str = "/query",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url:
            raise ValueError("HttpQueryClient requires 'base_url' parameter")

        self.base_url = base_url.rstrip("/")
        self.endpoint = endpoint
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

        logger.info(f"Initialized HttpQueryClient for '{self.base_url}{endpoint}', timeout={timeout}s")

    async def query(self, request: QueryRequest) -> BatchResponse:
        try:
            response = await self._client.post(self.endpoint, json=request.to_payload())
        except httpx.TimeoutException as e:
            logger.warning(f"Query request timed out after {self.timeout}s")
            raise TimeoutError(
                f"Query request timed out: {e}", timeout=self.timeout, original_error=e
            ) from e
        except httpx.NetworkError as e:
            logger.warning(f"Could not reach query service at '{self.base_url}': {e}")
            raise ConnectionError(f"Query request: {e}", original_error=e) from e
        except httpx.HTTPError as e:
            logger.warning(f"Query request failed: {type(e).__name__}: {e}")
            raise wrap_exception(e, context="Query request") from e

        if response.status_code >= 400:
            logger.warning(f"Query API error (status {response.status_code}): {response.text[:200]}")
            raise classify_http_error(response.status_code, response.text, dict(response.headers))

        try:
            return BatchResponse.model_validate(response.json())
        except ValueError as e:  # invalid JSON or a pydantic ValidationError
            raise QueryError(
                "Query service returned an unreadable batch",
                details={"status_code": response.status_code},
                original_error=e,
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()
