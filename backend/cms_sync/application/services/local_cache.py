"""Local Cache — ordered in-memory mirror of one remote content collection."""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from cms_sync.domain.entities import Entity
from cms_sync.domain.identity import TEMP_KEY_FIELD, normalize_identity

logger = logging.getLogger(__name__)


class LocalCache:
    """Single owner of the cached entity list.

    The list is an immutable tuple; every mutation builds a new tuple and
    bumps ``version``, so consumers can detect change by reference.
    """

    def __init__(self, entities: Iterable[Entity] = ()) -> None:
        self._entries: tuple[Entity, ...] = tuple(entities)
        self._version = 0

    @property
    def entries(self) -> tuple[Entity, ...]:
        return self._entries

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entries)

    def _swap(self, entries: tuple[Entity, ...]) -> None:
        self._entries = entries
        self._version += 1

    # ── Core operations ──────────────────────────────────────────────

    def replace(self, entities: Iterable[Entity]) -> None:
        """Atomically swap in a freshly fetched list."""
        self._swap(tuple(entities))
        logger.debug("Cache replaced: %d entities (version %d)", len(self._entries), self._version)

    def find_by_identity(self, identity: Any) -> Entity | None:
        """First entity whose key fields match ``identity``, else None."""
        for entity in self._entries:
            if entity.matches(identity):
                return entity
        return None

    def upsert(self, identity: Any, patch: dict[str, Any], *, optimistic: bool | None = None) -> Entity:
        """Merge ``patch`` into the matching entity, or append a new one built from it."""
        for index, entity in enumerate(self._entries):
            if entity.matches(identity):
                merged = entity.merged(patch, optimistic=optimistic)
                self._swap(self._entries[:index] + (merged,) + self._entries[index + 1:])
                return merged

        created = Entity(fields=dict(patch), optimistic=bool(optimistic))
        self._swap(self._entries + (created,))
        return created

    def remove(self, identity: Any) -> int:
        """Drop every entity matching ``identity``. Returns how many were removed."""
        kept = tuple(e for e in self._entries if not e.matches(identity))
        removed = len(self._entries) - len(kept)
        if removed:
            self._swap(kept)
        return removed

    # ── Record / temporary-key helpers ───────────────────────────────

    def append(self, entity: Entity) -> None:
        self._swap(self._entries + (entity,))

    def insert(self, index: int, entity: Entity) -> None:
        """Put ``entity`` back at ``index`` (clamped to the current length)."""
        index = max(0, min(index, len(self._entries)))
        self._swap(self._entries[:index] + (entity,) + self._entries[index:])

    def position(self, entity: Entity) -> int | None:
        """Index of this exact entity object, or None."""
        for index, candidate in enumerate(self._entries):
            if candidate is entity:
                return index
        return None

    def find_by_temp_key(self, temp_key: str) -> Entity | None:
        for entity in self._entries:
            if entity.temp_key is not None and entity.temp_key == temp_key:
                return entity
        return None

    def remove_temp(self, temp_key: str) -> bool:
        kept = tuple(e for e in self._entries if e.temp_key != temp_key)
        if len(kept) == len(self._entries):
            return False
        self._swap(kept)
        return True

    def find_matching(self, record: dict[str, Any]) -> Entity | None:
        """First entity sharing a key value (or temp key) with ``record``."""
        temp_key = record.get(TEMP_KEY_FIELD)
        for entity in self._entries:
            if entity.same_record_as(record):
                return entity
            if temp_key and entity.temp_key == temp_key:
                return entity
        return None

    def replace_entity(self, old: Entity, new: Entity) -> None:
        """Swap one entity (matched by reference) for another in place."""
        entries = tuple(new if e is old else e for e in self._entries)
        self._swap(entries)

    def remove_matching(self, record: dict[str, Any]) -> int:
        kept = tuple(e for e in self._entries if not e.same_record_as(record))
        removed = len(self._entries) - len(kept)
        if removed:
            self._swap(kept)
        return removed

    def duplicate_identities(self) -> list[str]:
        """Normalized identities held by more than one entity."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for entity in self._entries:
            key = normalize_identity(entity.identity)
            if key is None:
                continue
            if key in seen and key not in duplicates:
                duplicates.append(key)
            seen.add(key)
        return duplicates
