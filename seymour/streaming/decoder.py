"""Event decoder: turn one data frame into a typed stream event.

A malformed frame is reported as a :class:`DecodeFailure` value instead of
an exception, so one bad frame never aborts an otherwise healthy exchange.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

import pydantic

from seymour.streaming.events import EVENT_TYPES, StreamEvent, UnhandledEvent
from seymour.streaming.frames import DATA_PREFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeFailure:
    """A frame that could not be decoded.

    Attributes:
        frame: The raw frame (truncated for logging by callers).
        reason: Human-readable cause.
    """

    frame: str
    reason: str


def decode_frame(frame: str) -> StreamEvent | DecodeFailure:
    """Decode a ``data:`` frame into a StreamEvent.

    Unknown ``type`` values decode to :class:`UnhandledEvent`.

    Args:
        frame: One line from the frame reader.

    Returns:
        The decoded event, or a DecodeFailure describing why it was skipped.
    """
    if not frame.startswith(DATA_PREFIX):
        return _failure(frame, "not a data frame")

    raw = frame[len(DATA_PREFIX) :]
    if raw.startswith(" "):
        raw = raw[1:]

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        return _failure(frame, f"invalid JSON ({e.msg})")

    if not isinstance(payload, dict):
        return _failure(frame, "payload is not a JSON object")

    event_type = payload.get("type")
    if not isinstance(event_type, str) or not event_type:
        return _failure(frame, "missing event type")

    model = EVENT_TYPES.get(event_type)
    if model is None:
        logger.info("Unhandled stream event type: %s", event_type)
        return UnhandledEvent(type=event_type, payload=payload)

    try:
        return model.model_validate(payload)  # type: ignore[return-value]
    except pydantic.ValidationError as e:
        return _failure(frame, f"invalid {event_type} event ({e.error_count()} error(s))")


def _failure(frame: str, reason: str) -> DecodeFailure:
    logger.warning("Skipping undecodable frame: %s. Frame: %s", reason, frame[:200])
    return DecodeFailure(frame=frame, reason=reason)
