"""Domain entity — a change notification received from the channel."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ChangeAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass
class ChangeEvent:
    """Another client's write, as announced on the notification channel."""

    entity_type: str
    action: ChangeAction
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime | None = None

    @property
    def event_type(self) -> str:
        return f"{self.entity_type}_{self.action.value}"
