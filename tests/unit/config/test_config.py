import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from rankview.config import ClientConfig, SessionConfig, load_settings


class TestSettings:

    @patch.dict(os.environ, {
        "ENV": "production",
        "BACKEND_URL": "http://search.local:9000",
        "PAGE_SIZE": "50",
        "RETRY_MAX_ATTEMPTS": "3",
        "CURSOR_TTL_SECONDS": "60",
    }, clear=True)
    def test_load_settings_from_env(self):
        settings = load_settings()

        assert settings.ENV == "production"
        assert settings.BACKEND_URL == "http://search.local:9000"
        assert settings.PAGE_SIZE == 50
        assert settings.RETRY_MAX_ATTEMPTS == 3
        assert settings.CURSOR_TTL_SECONDS == 60

    def test_default_values(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings()

            assert settings.ENV == "development"
            assert settings.QUERY_ENDPOINT == "/query"
            assert settings.PAGE_SIZE == 20
            assert settings.RETRY_MAX_ATTEMPTS == 1
            assert settings.CURSOR_TTL_SECONDS == 300
            assert settings.CHUNKS_PER_QUERY == 100

    @patch.dict(os.environ, {"PAGE_SIZE": "0"}, clear=True)
    def test_invalid_page_size_rejected(self):
        with pytest.raises(ValidationError):
            load_settings()

    @patch.dict(os.environ, {"PAGE_SIZE": "10", "RETRY_MAX_ATTEMPTS": "4"}, clear=True)
    def test_session_config_from_settings(self):
        settings = load_settings()

        config = settings.session_config()
        retry = settings.retry_config()

        assert config.page_size == 10
        assert retry.max_attempts == 4

    def test_settings_are_frozen(self):
        settings = load_settings()
        with pytest.raises(ValidationError):
            settings.PAGE_SIZE = 5


class TestSessionConfig:

    def test_defaults(self):
        config = SessionConfig()

        assert config.page_size == 20
        assert config.initial_page == 1
        assert config.retry_config().max_attempts == 1

    def test_large_base_delay_raises_max_delay(self):
        retry = SessionConfig(retry_base_delay=45.0).retry_config()

        assert retry.max_delay == 45.0

    @pytest.mark.parametrize("field", ["page_size", "initial_page", "retry_max_attempts"])
    def test_rejects_zero(self, field):
        with pytest.raises(ValidationError):
            SessionConfig(**{field: 0})


class TestClientConfig:

    def test_params_default_empty(self):
        config = ClientConfig(type="http")

        assert config.params == {}


class TestClientConfigFromSettings:

    @patch.dict(os.environ, {
        "BACKEND_URL": "http://ranker.internal:9000",
        "QUERY_ENDPOINT": "/v2/query",
        "REQUEST_TIMEOUT": "4.5",
    }, clear=True)
    def test_http_client_config(self):
        config = load_settings().client_config()

        assert config.type == "http"
        assert config.params == {
            "base_url": "http://ranker.internal:9000",
            "endpoint": "/v2/query",
            "timeout": 4.5,
        }
