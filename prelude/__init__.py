"""
Prelude writing capture and replay service.

Records every editing, paste and chat interaction made while a student drafts
an essay, and rebuilds the session as a scrubbable timeline for instructors.
"""

__version__ = "0.1.0"
