"""
Idle-period compression of the replay timeline.

Gaps between consecutive activity timestamps longer than the idle threshold
are idle periods. Each one keeps ``edge_ms`` of real time on both sides, so
the last moments before a break and the first moments after it stay on the
normal timeline, and its middle zone is drawn as a fixed-width marker.

Inside a middle zone real time is scaled linearly onto the marker; outside
every zone the map is a plain shift, so round trips are exact there.

Example (defaults: threshold 2 min, display 60 s, edge 5 s):
    idle 100_000 -> 400_000 (300 s)
    middle zone   105_000 -> 395_000 (290 s real)
    marker width  50 s, so 240 s are removed from the timeline

Dependencies: bisect (stdlib), prelude.configs
System role: Real/compressed time mapping for scrubbing and playback
"""

import bisect
from collections.abc import Iterable
from dataclasses import dataclass

from prelude.configs.replay import ReplaySettings

MS_PER_MINUTE = 60_000


@dataclass(frozen=True)
class IdlePeriod:
    """
    One idle gap and its compressed middle zone.

    Attributes:
        start_ms: Timestamp of the last activity before the gap
        end_ms: Timestamp of the first activity after the gap
        zone_start_ms: Start of the compressed middle zone (real time)
        zone_end_ms: End of the compressed middle zone (real time)
        marker_ms: Displayed width of the middle zone
    """

    start_ms: int
    end_ms: int
    zone_start_ms: int
    zone_end_ms: int
    marker_ms: int

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms

    @property
    def minutes(self) -> int:
        """Whole minutes shown on the idle marker."""
        return self.duration_ms // MS_PER_MINUTE

    @property
    def zone_ms(self) -> int:
        return self.zone_end_ms - self.zone_start_ms

    @property
    def saved_ms(self) -> int:
        """Timeline length removed by compressing this period."""
        return self.zone_ms - self.marker_ms


class IdleCompressionMapper:
    """
    Monotonic two-way mapping between real and compressed time.

    Compressed time shares the real time origin: before the first middle zone
    both are equal, and with no idle periods the map is the identity.

    Attributes:
        settings: Idle threshold, display width and edge length
        start_ms: Session start (real time)
        end_ms: Session end (real time)
        idle_periods: Detected idle periods in time order
    """

    def __init__(
        self,
        timestamps: Iterable[int],
        settings: ReplaySettings | None = None,
        start_ms: int | None = None,
        end_ms: int | None = None,
    ) -> None:
        """
        Detect idle periods.

        Args:
            timestamps: Editor event and chat message timestamps, any order
            settings: Replay settings (defaults from environment)
            start_ms: Session start; takes part in idle detection when given
            end_ms: Session end; takes part in idle detection when given
        """
        self.settings = settings or ReplaySettings()

        points = sorted(timestamps)
        if start_ms is None:
            start_ms = points[0] if points else 0
        if end_ms is None:
            end_ms = points[-1] if points else start_ms
        end_ms = max(start_ms, end_ms)

        self.start_ms = start_ms
        self.end_ms = end_ms

        points = [start_ms] + [p for p in points if start_ms < p < end_ms] + [end_ms]
        self.idle_periods: list[IdlePeriod] = [
            self._idle_period(before, after)
            for before, after in zip(points, points[1:])
            if after - before > self.settings.idle_threshold_ms
        ]

        # Compressed position of each zone start, for inverse lookups
        self._zone_starts = [p.zone_start_ms for p in self.idle_periods]
        self._compressed_zone_starts: list[float] = []
        saved = 0
        for period in self.idle_periods:
            self._compressed_zone_starts.append(period.zone_start_ms - saved)
            saved += period.saved_ms

    def _idle_period(self, start_ms: int, end_ms: int) -> IdlePeriod:
        edge = self.settings.idle_edge_ms
        return IdlePeriod(
            start_ms=start_ms,
            end_ms=end_ms,
            zone_start_ms=start_ms + edge,
            zone_end_ms=end_ms - edge,
            marker_ms=self.settings.idle_display_ms - 2 * edge,
        )

    @property
    def real_duration(self) -> int:
        return self.end_ms - self.start_ms

    @property
    def compressed_duration(self) -> float:
        return self.real_to_compressed(self.end_ms) - self.real_to_compressed(self.start_ms)

    def zone_containing(self, real_ms: float) -> IdlePeriod | None:
        """Idle period whose middle zone strictly contains real_ms."""
        index = bisect.bisect_right(self._zone_starts, real_ms) - 1
        if index < 0:
            return None
        period = self.idle_periods[index]
        if period.zone_start_ms < real_ms < period.zone_end_ms:
            return period
        return None

    def in_compressed_zone(self, real_ms: float) -> bool:
        return self.zone_containing(real_ms) is not None

    def real_to_compressed(self, real_ms: float) -> float:
        """
        Map a real timestamp onto the compressed timeline.

        Every zone fully behind real_ms subtracts its saved length; a zone
        containing real_ms is scaled linearly onto its marker.
        """
        index = bisect.bisect_right(self._zone_starts, real_ms) - 1
        if index < 0:
            return real_ms

        period = self.idle_periods[index]
        compressed_start = self._compressed_zone_starts[index]
        if real_ms < period.zone_end_ms:
            scale = period.marker_ms / period.zone_ms
            return compressed_start + (real_ms - period.zone_start_ms) * scale
        return real_ms - (period.zone_start_ms - compressed_start) - period.saved_ms

    def compressed_to_real(self, compressed_ms: float) -> float:
        """Inverse of real_to_compressed."""
        index = bisect.bisect_right(self._compressed_zone_starts, compressed_ms) - 1
        if index < 0:
            return compressed_ms

        period = self.idle_periods[index]
        compressed_start = self._compressed_zone_starts[index]
        offset = compressed_ms - compressed_start
        if offset < period.marker_ms:
            scale = period.zone_ms / period.marker_ms
            return period.zone_start_ms + offset * scale
        return period.zone_end_ms + (offset - period.marker_ms)

    def real_to_fraction(self, real_ms: float) -> float:
        """Position of real_ms on the compressed timeline, in [0, 1]."""
        duration = self.compressed_duration
        if duration <= 0:
            return 0.0
        fraction = (
            self.real_to_compressed(real_ms) - self.real_to_compressed(self.start_ms)
        ) / duration
        return min(1.0, max(0.0, fraction))

    def fraction_to_real(self, fraction: float) -> float:
        """Real time under a click at ``fraction`` of the compressed timeline."""
        fraction = min(1.0, max(0.0, fraction))
        origin = self.real_to_compressed(self.start_ms)
        return self.compressed_to_real(origin + fraction * self.compressed_duration)
