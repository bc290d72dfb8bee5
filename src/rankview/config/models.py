"""Configuration models for query sessions and query clients."""

from typing import Any

from pydantic import BaseModel, Field

from ..utils.retry import RetryConfig


class ClientConfig(BaseModel):
    """Configuration for a query client.

    Attributes:
        type: Client type identifier (e.g., "http", "in_memory")
        params: Client-specific parameters as a dictionary
    """

    type: str
    params: dict[str, Any] = Field(default_factory=dict)


class SessionConfig(BaseModel):
    """Pagination and retry settings shared by the sessions of one view.

    Attributes:
        page_size: Number of results per page
        initial_page: Page a new session starts on
        retry_max_attempts: Attempts per query request (1 disables retries)
        retry_base_delay: Initial backoff delay in seconds
    """

    page_size: int = Field(default=20, ge=1)
    initial_page: int = Field(default=1, ge=1)
    retry_max_attempts: int = Field(default=1, ge=1)
    retry_base_delay: float = Field(default=0.5, ge=0)

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=self.retry_max_attempts,
            base_delay=self.retry_base_delay,
            max_delay=max(30.0, self.retry_base_delay),
        )
