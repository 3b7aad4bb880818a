"""Domain entity for in-flight optimistic mutations."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from cms_sync.domain.entities.entity import Entity


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class MutationState(str, Enum):
    """Lifecycle states of a locally issued mutation."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


@dataclass
class Mutation:
    """A single create/update/delete dispatched against the content API.

    Remembers what the optimistic change displaced (the target entity and
    its position) so a failure can undo exactly that change and nothing else.
    """

    kind: MutationKind
    resource: str
    payload: dict[str, Any] = field(default_factory=dict)
    target: Any | None = None          # identity for update/delete
    temp_key: str | None = None        # speculative row key for create
    previous: Entity | None = None     # target before dispatch (update/delete)
    index: int | None = None           # target position before dispatch (delete)
    id: str = field(default_factory=lambda: str(uuid4()))
    state: MutationState = MutationState.PENDING
    error: str | None = None
    dispatched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    settled_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.state is MutationState.PENDING

    def mark_confirmed(self) -> None:
        """Transition to confirmed after the server accepted the change."""
        self.state = MutationState.CONFIRMED
        self.settled_at = datetime.now(timezone.utc)

    def mark_rolled_back(self, error: str) -> None:
        """Transition to rolled back after the optimistic change was undone."""
        self.state = MutationState.ROLLED_BACK
        self.error = error
        self.settled_at = datetime.now(timezone.utc)
