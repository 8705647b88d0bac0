"""
Logging utilities for safe structured logging.

Editor events carry whole documents and pasted text, neither of which
belongs in a log line. Values passed as log context are reduced to a
summary: events by kind and sequence number, documents by block count,
pastes by length.

Dependencies: logging (stdlib), prelude.core.events
System role: Logging helper functions
"""

import logging
from collections import Counter
from typing import Any

from prelude.core.events import EditorEvent, Paste, Snapshot, Submission


def summarize_event(event: EditorEvent | Snapshot | Paste | Submission) -> str:
    """
    One-token summary of an editor event or payload, without its content.

    Examples:
        snapshot#3(2 blocks), paste_external#4(17 chars), submission(5 blocks)
    """
    if isinstance(event, EditorEvent):
        label, payload = f"{event.kind.value}#{event.sequence_number}", event.payload
    else:
        label, payload = None, event

    match payload:
        case Snapshot(document=document) | Submission(document=document):
            size = f"{len(document)} blocks"
        case Paste(content=content):
            size = f"{len(content)} chars"
        case _:
            size = "?"

    if label is None:
        label = type(payload).__name__.lower()
    return f"{label}({size})"


def safe_log_value(value: Any, max_length: int = 200) -> str:
    """
    Safely convert any value to a string for logging.

    Args:
        value: Value to convert
        max_length: Maximum length before truncating

    Returns:
        str: Safe string representation
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, str):
            val_str = value
        elif isinstance(value, (EditorEvent, Snapshot, Paste, Submission)):
            val_str = summarize_event(value)
        elif isinstance(value, (list, tuple)) and value and all(
            isinstance(item, EditorEvent) for item in value
        ):
            kinds = Counter(item.kind.value for item in value)
            breakdown = ", ".join(f"{kind} x{count}" for kind, count in kinds.items())
            val_str = f"events({len(value)}: {breakdown})"
        elif isinstance(value, (list, tuple)):
            val_str = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            val_str = f"dict({len(value)} keys)"
        else:
            val_str = str(value)

        if len(val_str) > max_length:
            return val_str[:max_length] + f"... (truncated, {len(val_str)} total)"
        return val_str
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log a message with every context value passed through safe_log_value.

    Args:
        logger: Logger instance
        level: Log level
        message: Log message
        **context: Attached as record attributes
    """
    logger.log(
        level,
        message,
        extra={key: safe_log_value(val) for key, val in context.items()},
    )


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: Exception,
    **context,
) -> None:
    """Log an exception with its type, message and summarized context."""
    safe_context = {key: safe_log_value(val) for key, val in context.items()}
    safe_context["error_type"] = type(exc).__name__
    safe_context["error_msg"] = str(exc)
    logger.exception(message, extra=safe_context)
