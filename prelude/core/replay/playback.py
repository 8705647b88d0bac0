"""
Replay playback controller.

Drives the real-time playhead from animation ticks. Each tick advances by
``delta_ms * speed``; landing inside an idle middle zone jumps straight to
the zone's end in that same tick, and reaching the session end stops
playback.

Dependencies: prelude.core.replay, prelude.configs
System role: Instructor-side playback state machine
"""

import logging

from prelude.configs.replay import ReplaySettings
from prelude.core.exceptions import ValidationError
from prelude.core.replay.idle_compression import IdleCompressionMapper
from prelude.core.replay.timeline import ReplayFrame, ReplayTimeline

logger = logging.getLogger(__name__)


class PlaybackController:
    """
    Playhead over a replay timeline.

    Usage:
        player = PlaybackController.for_timeline(timeline)
        player.play()
        frame = player.tick(16)
    """

    def __init__(
        self,
        timeline: ReplayTimeline,
        mapper: IdleCompressionMapper,
        settings: ReplaySettings | None = None,
    ) -> None:
        self.timeline = timeline
        self.mapper = mapper
        self.settings = settings or timeline.settings
        self.speed = self.settings.default_speed
        self.current_ms: float = mapper.start_ms
        self.playing = False

    @classmethod
    def for_timeline(
        cls, timeline: ReplayTimeline, settings: ReplaySettings | None = None
    ) -> "PlaybackController":
        """Build a controller with an idle mapper over the timeline's activity."""
        settings = settings or timeline.settings
        mapper = IdleCompressionMapper(
            timeline.timestamps(),
            settings=settings,
            start_ms=timeline.start_ms,
            end_ms=timeline.end_ms,
        )
        return cls(timeline, mapper, settings)

    @property
    def start_ms(self) -> int:
        return self.mapper.start_ms

    @property
    def end_ms(self) -> int:
        return self.mapper.end_ms

    @property
    def progress(self) -> float:
        """Playhead position as a fraction of the compressed timeline."""
        return self.mapper.real_to_fraction(self.current_ms)

    @property
    def frame(self) -> ReplayFrame:
        return self.timeline.frame_at(self.current_ms)

    def play(self) -> None:
        """Start playing; a finished replay restarts from the beginning."""
        if self.current_ms >= self.end_ms:
            self.current_ms = self.start_ms
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def toggle(self) -> bool:
        """Flip play/pause and return the new playing state."""
        if self.playing:
            self.pause()
        else:
            self.play()
        return self.playing

    def set_speed(self, speed: float) -> None:
        """
        Change the playback speed multiplier.

        Raises:
            ValidationError: If speed is not one of the configured options
        """
        if speed not in self.settings.speed_options:
            raise ValidationError(
                f"Unsupported playback speed: {speed}",
                field="speed",
                details={"options": list(self.settings.speed_options)},
            )
        self.speed = speed

    def seek(self, real_ms: float) -> ReplayFrame:
        """Move the playhead to real_ms, clamped to the session bounds."""
        self.current_ms = min(self.end_ms, max(self.start_ms, real_ms))
        return self.frame

    def seek_fraction(self, fraction: float) -> ReplayFrame:
        """Move the playhead to a click position on the compressed timeline."""
        return self.seek(self.mapper.fraction_to_real(fraction))

    def tick(self, delta_ms: float) -> ReplayFrame:
        """
        Advance one animation frame.

        Args:
            delta_ms: Wall-clock milliseconds since the previous frame

        Returns:
            ReplayFrame: State at the new playhead position
        """
        if not self.playing or delta_ms <= 0:
            return self.frame

        target = self.current_ms + delta_ms * self.speed
        zone = self.mapper.zone_containing(target)
        if zone is not None:
            logger.debug(
                "Skipping idle period",
                extra={"idle_minutes": zone.minutes, "zone_end_ms": zone.zone_end_ms},
            )
            target = zone.zone_end_ms

        if target >= self.end_ms:
            target = self.end_ms
            self.playing = False

        self.current_ms = target
        return self.frame
