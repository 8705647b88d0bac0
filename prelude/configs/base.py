"""
Base configuration settings.

Settings every config group shares, plus the HTTP service settings that
main.py reads when building and serving the app. Read from the environment
and from ``.env``.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Base configuration class shared by every settings group."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Deployment environment, attached to startup failure logs",
    )
    debug: bool = Field(default=False, description="Auto-reload when run as a script")
    log_level: str = Field(
        default="INFO",
        description="Root log level for the service and capture loggers",
    )


class ServiceSettings(BaseSettings):
    """
    HTTP service settings, read without a prefix.

    Only the root Settings extends this, so prefixed sub-settings such as
    POSTGRES_HOST never collide with the service host and port.
    """

    app_name: str = Field(default="Prelude Writing Capture API")
    api_prefix: str = Field(
        default="/api/v1",
        description="Mount point of the events, sessions and conversations routers",
    )
    host: str = Field(default="localhost")
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: list[str] = Field(
        default=["*"],
        description="Origins of the editor pages allowed to send event batches",
    )
