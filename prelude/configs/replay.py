"""
Replay configuration settings.

Paste badge window, idle compression geometry and playback speeds.
All durations are milliseconds.

Dependencies: pydantic, pydantic_settings
System role: Replay timeline configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from prelude.configs.base import BaseSettings


class ReplaySettings(BaseSettings):
    """Replay reconstruction and idle compression configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REPLAY_",
        case_sensitive=False,
        extra="ignore",
    )

    paste_indicator_window_ms: int = Field(
        default=2000, gt=0, description="How long a paste badge stays visible"
    )
    idle_threshold_ms: int = Field(
        default=120_000, gt=0, description="Gaps strictly longer than this are idle"
    )
    idle_display_ms: int = Field(
        default=60_000, gt=0, description="Compressed width of one idle period"
    )
    idle_edge_ms: int = Field(
        default=5000, ge=0, description="Real time kept on each side of an idle period"
    )
    default_speed: float = Field(default=5.0, gt=0)
    speed_options: list[float] = Field(default_factory=lambda: [0.5, 1.0, 2.0, 5.0, 10.0])
    empty_session_duration_ms: int = Field(
        default=60_000, gt=0, description="Timeline length when a session has no events"
    )

    @model_validator(mode="after")
    def check_idle_geometry(self) -> "ReplaySettings":
        """Idle display must be narrower than the threshold and fit both edges."""
        if self.idle_display_ms >= self.idle_threshold_ms:
            raise ValueError("idle_display_ms must be smaller than idle_threshold_ms")
        if 2 * self.idle_edge_ms >= self.idle_display_ms:
            raise ValueError("two idle edges must fit inside idle_display_ms")
        if self.default_speed not in self.speed_options:
            raise ValueError("default_speed must be one of speed_options")
        return self
