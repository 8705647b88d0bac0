"""
Client-side event capture.

Event queue and batcher, scheduler abstraction, batch transports and the
per-session capture context.
"""

from prelude.core.capture.capture_session import CaptureSession
from prelude.core.capture.event_tracker import EventTracker, SaveStatus
from prelude.core.capture.scheduler import AsyncioScheduler, Scheduler, VirtualScheduler
from prelude.core.capture.transport import EventTransport, HttpEventTransport

__all__ = [
    "AsyncioScheduler",
    "CaptureSession",
    "EventTracker",
    "EventTransport",
    "HttpEventTransport",
    "SaveStatus",
    "Scheduler",
    "VirtualScheduler",
]
