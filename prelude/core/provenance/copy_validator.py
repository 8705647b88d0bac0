"""
Copy/paste provenance validator.

Tracks assistant messages and the last internal copy of one session, and
decides whether a paste came from the assistant (internal) or from outside
(external).

Rules, first match wins, applied to the trimmed paste:
    1. shorter than the minimum paste length: external
    2. equals the last internal copy: internal
    3. equals a registered assistant message: internal
    4. long enough and a substring of an assistant message: internal
    5. long enough and fuzzy-similar to an assistant message: internal
    6. otherwise external

This is an analytics heuristic for instructors, not a security boundary.

Dependencies: rapidfuzz, prelude.configs
System role: Paste classification for the capture side
"""

import enum
import logging

from rapidfuzz.distance import Levenshtein

from prelude.configs.provenance import ProvenanceSettings

logger = logging.getLogger(__name__)


class PasteVerdict(str, enum.Enum):
    """Provenance of a paste."""

    INTERNAL = "internal"
    EXTERNAL = "external"

    @property
    def is_internal(self) -> bool:
        return self is PasteVerdict.INTERNAL


def similarity(a: str, b: str) -> float:
    """
    Normalized edit-distance similarity in [0, 1].

    Classic Levenshtein distance (unit insert, delete and substitute costs,
    no transpositions) normalized by the longer string's length.

    Args:
        a: First string
        b: Second string

    Returns:
        float: 1.0 for identical strings (including two empty ones)
    """
    longer, shorter = (a, b) if len(a) > len(b) else (b, a)
    if not longer:
        return 1.0
    distance = Levenshtein.distance(longer, shorter)
    return (len(longer) - distance) / len(longer)


class CopyValidator:
    """
    Per-session paste classifier.

    One instance belongs to one capture session and is discarded with it, so
    assistant history never leaks between sessions.

    Attributes:
        settings: Length floors and similarity threshold
    """

    def __init__(self, settings: ProvenanceSettings | None = None) -> None:
        self.settings = settings or ProvenanceSettings()
        self._assistant_messages: set[str] = set()
        self._internal_copy: str | None = None

    @property
    def history_size(self) -> int:
        """Number of distinct assistant messages registered."""
        return len(self._assistant_messages)

    def register_assistant_message(self, content: str) -> None:
        self._assistant_messages.add(content.strip())

    def mark_internal_copy(self, content: str) -> None:
        """Remember text copied from inside the editor or chat panel."""
        self._internal_copy = content.strip()

    def clear_copy_buffer(self) -> None:
        self._internal_copy = None

    def validate_paste(self, content: str) -> bool:
        """
        Check whether pasted content is internal.

        Does not touch the copy buffer; use classify_paste for the full
        paste-processing step.

        Args:
            content: Raw pasted text

        Returns:
            bool: True if internal, False if external
        """
        trimmed = content.strip()
        settings = self.settings

        if len(trimmed) < settings.min_paste_length:
            return False

        if self._internal_copy and trimmed == self._internal_copy:
            return True

        if trimmed in self._assistant_messages:
            return True

        if len(trimmed) >= settings.substring_min_length and any(
            trimmed in message for message in self._assistant_messages
        ):
            return True

        if len(trimmed) >= settings.fuzzy_min_length:
            for message in self._assistant_messages:
                if similarity(trimmed, message) >= settings.similarity_threshold:
                    return True

        return False

    def classify_paste(self, content: str) -> PasteVerdict:
        """
        Classify a paste and clear the internal copy buffer.

        The buffer only ever vouches for the paste immediately following the
        copy.

        Args:
            content: Raw pasted text

        Returns:
            PasteVerdict: INTERNAL or EXTERNAL
        """
        try:
            internal = self.validate_paste(content)
        finally:
            self.clear_copy_buffer()

        verdict = PasteVerdict.INTERNAL if internal else PasteVerdict.EXTERNAL
        logger.debug(
            "Paste classified",
            extra={
                "verdict": verdict.value,
                "paste_length": len(content),
                "history_size": self.history_size,
            },
        )
        return verdict
