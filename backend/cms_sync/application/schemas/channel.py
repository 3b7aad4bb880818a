"""Pydantic schema for notification channel messages."""

import json
import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from cms_sync.domain.entities import ChangeAction, ChangeEvent
from cms_sync.domain.exceptions import ChannelMessageError

_CHANGE_TYPE = re.compile(r"^(\w+)_(created|updated|deleted)$")


class ChannelMessage(BaseModel):
    """Wire format: ``{"type": "<entity>_<action>", "data": {...}, "timestamp": "..."}``."""

    type: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime | None = None

    model_config = {"extra": "ignore"}


def parse_channel_message(raw: str | bytes) -> ChannelMessage:
    """Decode and validate a raw channel frame.

    Raises:
        ChannelMessageError: The frame is not JSON or does not fit the schema.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ChannelMessageError(text, f"invalid JSON ({exc.msg})") from exc
    if not isinstance(payload, dict):
        raise ChannelMessageError(text, "expected a JSON object")
    try:
        return ChannelMessage.model_validate(payload)
    except ValidationError as exc:
        raise ChannelMessageError(text, f"{exc.error_count()} validation error(s)") from exc


def to_change_event(message: ChannelMessage) -> ChangeEvent | None:
    """Map a message to a ChangeEvent, or None when it is not a change notification."""
    match = _CHANGE_TYPE.match(message.type)
    if match is None:
        return None
    entity, action = match.groups()
    return ChangeEvent(
        entity_type=entity,
        action=ChangeAction(action),
        data=message.data,
        timestamp=message.timestamp,
    )
