"""Domain entity — pure Python business object for a stored content record."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

# Fields the store owns; write payloads cannot set them.
RESERVED_FIELDS = frozenset({"id", "docId", "createdAt", "updatedAt", "tempId"})


@dataclass
class ContentEntry:
    """One managed content record (service, project, testimonial, post, ...).

    Entries carry two identities: a numeric surrogate ``id`` assigned by the
    store and a string ``doc_id`` document key.  Either one addresses the entry.
    """

    content_type: str
    data: dict[str, Any]
    id: int | None = None
    doc_id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.data = strip_reserved(self.data)

    def update(self, patch: dict[str, Any]) -> None:
        """Merge ``patch`` into the stored data and refresh updated_at."""
        self.data = {**self.data, **strip_reserved(patch)}
        self.updated_at = datetime.now(timezone.utc)

    def to_payload(self) -> dict[str, Any]:
        """Flat wire representation shared by HTTP responses and notifications."""
        return {
            **self.data,
            "id": self.id,
            "docId": self.doc_id,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


def strip_reserved(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in RESERVED_FIELDS}
