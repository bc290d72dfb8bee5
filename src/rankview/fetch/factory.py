"""Query client factory for creating client instances."""

from typing import Any

from loguru import logger

from rankview.config.models import ClientConfig
from rankview.config.settings import settings

from .base import BaseQueryClient
from .providers.http import HttpQueryClient
from .providers.in_memory import InMemoryQueryClient


class QueryClientFactory:
    """Factory for creating query clients based on type.

    This factory maintains a registry of available client types
    and creates instances based on string identifiers.
    """

    _registry: dict[str, type[BaseQueryClient]] = {
        "http": HttpQueryClient,
        "in_memory": InMemoryQueryClient,
    }

    @classmethod
    def create(cls, client_type: str, **params: Any) -> BaseQueryClient:
        """Create a query client instance by type.

        Args:
            client_type: Type identifier (e.g., "http")
            **params: Initialization parameters for the client

        Returns:
            Query client instance

        Raises:
            ValueError: If client type is not registered
        """
        if client_type not in cls._registry:
            available = ", ".join(cls._registry.keys())
            raise ValueError(
                f"Unknown query client type: '{client_type}'. Available types: {available}"
            )

        client_class = cls._registry[client_type]

        # Fill in the configured backend when not given explicitly
        if client_type == "http":
            params.setdefault("base_url", settings.BACKEND_URL)
            params.setdefault("endpoint", settings.QUERY_ENDPOINT)
            params.setdefault("timeout", settings.REQUEST_TIMEOUT)

        logger.debug(f"Creating {client_class.__name__} with params: {list(params)}")

        return client_class(**params)

    @classmethod
    def from_config(cls, config: ClientConfig | None = None) -> BaseQueryClient:
        """Create a client from ``config``, or from the global settings when omitted."""
        config = config or settings.client_config()
        return cls.create(config.type, **config.params)

    @classmethod
    def register(cls, client_type: str, client_class: type[BaseQueryClient]):
        """Register a new query client type.

        Raises:
            TypeError: If client_class is not a subclass of BaseQueryClient
        """
        if not issubclass(client_class, BaseQueryClient):
            raise TypeError(f"{client_class.__name__} must inherit from BaseQueryClient")

        cls._registry[client_type] = client_class
        logger.info(f"Registered query client type: {client_type}")

    @classmethod
    def list_types(cls) -> list[str]:
        return list(cls._registry.keys())
