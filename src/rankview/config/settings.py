import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from ..utils.retry import RetryConfig
from .models import ClientConfig, SessionConfig

# This file: src/rankview/config/settings.py
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
ENV_PATH = PROJECT_ROOT / ".env"

if ENV_PATH.exists():
    load_dotenv(ENV_PATH)
else:
    # Fallback to simple load_dotenv which looks in cwd
    load_dotenv()


class Settings(BaseModel):
    """Global Application Settings"""

    # Environment
    ENV: str = Field(default="development", description="Environment: development, production, testing")

    # Query backend
    BACKEND_URL: str = Field(default="http://127.0.0.1:8765", description="Base URL of the query backend")
    QUERY_ENDPOINT: str = Field(default="/query", description="Path of the cursor query endpoint")
    REQUEST_TIMEOUT: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")

    # Sessions
    PAGE_SIZE: int = Field(default=20, ge=1, description="Results per page")
    RETRY_MAX_ATTEMPTS: int = Field(default=1, ge=1, description="Attempts per query request")
    RETRY_BASE_DELAY: float = Field(default=0.5, ge=0, description="Initial backoff delay in seconds")

    # Reference backend
    CURSOR_TTL_SECONDS: int = Field(default=300, ge=1, description="Idle lifetime of a cursor")
    CHUNKS_PER_QUERY: int = Field(default=100, ge=1, description="Chunks aggregated per query request")

    model_config = {
        "frozen": True,
    }

    def client_config(self) -> ClientConfig:
        """HTTP query client pointed at the configured backend."""
        return ClientConfig(
            type="http",
            params={
                "base_url": self.BACKEND_URL,
                "endpoint": self.QUERY_ENDPOINT,
                "timeout": self.REQUEST_TIMEOUT,
            },
        )

    def retry_config(self) -> RetryConfig:
        return self.session_config().retry_config()

    def session_config(self) -> SessionConfig:
        return SessionConfig(
            page_size=self.PAGE_SIZE,
            retry_max_attempts=self.RETRY_MAX_ATTEMPTS,
            retry_base_delay=self.RETRY_BASE_DELAY,
        )


def load_settings() -> Settings:
    """Load settings from environment variables."""
    return Settings(
        ENV=os.getenv("ENV", "development"),
        BACKEND_URL=os.getenv("BACKEND_URL", "http://127.0.0.1:8765"),
        QUERY_ENDPOINT=os.getenv("QUERY_ENDPOINT", "/query"),
        REQUEST_TIMEOUT=float(os.getenv("REQUEST_TIMEOUT", "30.0")),
        PAGE_SIZE=int(os.getenv("PAGE_SIZE", "20")),
        RETRY_MAX_ATTEMPTS=int(os.getenv("RETRY_MAX_ATTEMPTS", "1")),
        RETRY_BASE_DELAY=float(os.getenv("RETRY_BASE_DELAY", "0.5")),
        CURSOR_TTL_SECONDS=int(os.getenv("CURSOR_TTL_SECONDS", "300")),
        CHUNKS_PER_QUERY=int(os.getenv("CHUNKS_PER_QUERY", "100")),
    )


# Global settings instance
settings = load_settings()
