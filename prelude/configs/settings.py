"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from prelude.configs.base import ServiceSettings
from prelude.configs.capture import CaptureSettings
from prelude.configs.database import DatabaseSettings
from prelude.configs.provenance import ProvenanceSettings
from prelude.configs.replay import ReplaySettings


class Settings(ServiceSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = DatabaseSettings()
    capture: CaptureSettings = CaptureSettings()
    provenance: ProvenanceSettings = ProvenanceSettings()
    replay: ReplaySettings = ReplaySettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from prelude.configs import get_settings
        settings = get_settings()
    """
    return Settings()
