"""
Capture configuration settings.

Timing and batching knobs of the editor event tracker.
All durations are milliseconds.

Dependencies: pydantic, pydantic_settings
System role: Event queue and batcher configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from prelude.configs.base import BaseSettings


class CaptureSettings(BaseSettings):
    """Event tracker throttling, snapshot triggers and flush thresholds."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CAPTURE_",
        case_sensitive=False,
        extra="ignore",
    )

    activity_throttle_ms: int = Field(
        default=1000, gt=0, description="Activity closer than this is coalesced"
    )
    inactivity_delay_ms: int = Field(
        default=1000, gt=0, description="Quiet period before a pause snapshot"
    )
    keystrokes_per_snapshot: int = Field(
        default=10, gt=0, description="Counted activities that force a snapshot"
    )
    snapshot_ceiling_ms: int = Field(
        default=3000, gt=0, description="Maximum snapshot staleness while active"
    )
    batch_size: int = Field(
        default=10, gt=0, description="Queue length that triggers a flush"
    )
    batch_delay_ms: int = Field(
        default=5000, gt=0, description="Age of oldest unflushed event that triggers a flush"
    )

    events_url: str = Field(
        default="http://localhost:8000/api/v1/events",
        description="Persistence endpoint used by the HTTP transport",
    )
    http_timeout_s: float = Field(default=10.0, gt=0, description="Flush request timeout")
