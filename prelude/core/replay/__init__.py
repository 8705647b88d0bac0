"""
Instructor-side replay.

Point-in-time reconstruction, idle compression of the timeline and the
playback controller.
"""

from prelude.core.replay.idle_compression import IdleCompressionMapper, IdlePeriod
from prelude.core.replay.playback import PlaybackController
from prelude.core.replay.timeline import (
    PasteIndicator,
    ReplayFrame,
    ReplayTimeline,
    TimelineMarker,
    document_text,
)

__all__ = [
    "IdleCompressionMapper",
    "IdlePeriod",
    "PasteIndicator",
    "PlaybackController",
    "ReplayFrame",
    "ReplayTimeline",
    "TimelineMarker",
    "document_text",
]
