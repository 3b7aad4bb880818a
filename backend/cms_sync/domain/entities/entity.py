"""Domain entity — one cached content record as seen by the admin list view."""

from dataclasses import dataclass, field, replace
from typing import Any

from cms_sync.domain.identity import matches_identity, resolve_identity, same_record


@dataclass(frozen=True)
class Entity:
    """Immutable cache entry.

    ``fields`` is the record payload exactly as producers sent it, identity
    keys included.  ``temp_key`` is only set on speculative rows created
    locally and not yet confirmed by the server.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    optimistic: bool = False
    temp_key: str | None = None

    @property
    def identity(self) -> Any | None:
        return resolve_identity(self.fields)

    @property
    def key(self) -> Any | None:
        """Row key for display: the identity, else the temporary key."""
        identity = self.identity
        return identity if identity is not None else self.temp_key

    def matches(self, identity: Any) -> bool:
        return matches_identity(self.fields, identity)

    def same_record_as(self, record: dict[str, Any]) -> bool:
        return same_record(self.fields, record)

    def merged(self, patch: dict[str, Any], *, optimistic: bool | None = None) -> "Entity":
        """Return a copy with ``patch`` merged over the existing fields."""
        return replace(
            self,
            fields={**self.fields, **patch},
            optimistic=self.optimistic if optimistic is None else optimistic,
        )

    def reverted(self, patch: dict[str, Any], previous: "Entity", *, optimistic: bool) -> "Entity":
        """Undo ``patch``: its fields take their ``previous`` values, or are dropped."""
        fields: dict[str, Any] = {}
        for name, value in self.fields.items():
            if name not in patch:
                fields[name] = value
            elif name in previous.fields:
                fields[name] = previous.fields[name]
        return replace(self, fields=fields, optimistic=optimistic)

    def with_optimistic(self, optimistic: bool) -> "Entity":
        if optimistic == self.optimistic:
            return self
        return replace(self, optimistic=optimistic)
