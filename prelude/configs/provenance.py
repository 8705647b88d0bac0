"""
Paste provenance configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Copy validator thresholds
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from prelude.configs.base import BaseSettings


class ProvenanceSettings(BaseSettings):
    """Length floors and similarity threshold for paste classification."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROVENANCE_",
        case_sensitive=False,
        extra="ignore",
    )

    min_paste_length: int = Field(default=3, ge=0)
    substring_min_length: int = Field(default=10, ge=0)
    fuzzy_min_length: int = Field(default=20, ge=0)
    similarity_threshold: float = Field(default=0.95, ge=0.0, le=1.0)
