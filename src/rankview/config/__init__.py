"""Configuration system for RankView."""

from .models import ClientConfig, SessionConfig
from .settings import Settings, load_settings, settings

__all__ = ["ClientConfig", "SessionConfig", "Settings", "load_settings", "settings"]
