"""Reconciler — optimistic mutations and remote notification merging.

Keeps one LocalCache consistent with the remote collection while three
sources race against it: the admin's own CRUD calls, change notifications
from other clients, and the debounced backstop refetch.
"""

import asyncio
import itertools
import logging
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from cms_sync.application.interfaces import ContentApi
from cms_sync.application.services.local_cache import LocalCache
from cms_sync.domain.entities import (
    ChangeAction,
    ChangeEvent,
    Entity,
    Mutation,
    MutationKind,
)
from cms_sync.domain.exceptions import IdentityResolutionError
from cms_sync.domain.identity import normalize_identity, resolve_identity
from cms_sync.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
slog = SyncLogger("ContentSync")

DEFAULT_REFETCH_DELAY = 0.5

_temp_sequence = itertools.count(1)


def new_temp_key() -> str:
    """Session-unique key for a speculative row: millis + sequence + random suffix."""
    millis = int(time.time() * 1000)
    return f"temp-{millis}-{next(_temp_sequence)}-{uuid4().hex[:9]}"


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Reconciler:
    """Applies local mutations optimistically and merges remote change events.

    Every mutation is tracked as a ``Mutation`` (pending → confirmed |
    rolled back).  A failure undoes only that mutation's own optimistic
    change, leaving anything settled meanwhile in place, and re-raises.
    Each settlement and each merged notification (re)schedules a single
    debounced refetch that corrects whatever the merge rules missed.
    """

    def __init__(
        self,
        cache: LocalCache,
        api: ContentApi,
        resource: str,
        *,
        refetch_delay: float = DEFAULT_REFETCH_DELAY,
        history_size: int = 50,
    ) -> None:
        self._cache = cache
        self._api = api
        self._resource = resource
        self._refetch_delay = refetch_delay
        self._in_flight: dict[str, Mutation] = {}
        self._history: deque[Mutation] = deque(maxlen=history_size)
        self._refetch_handle: asyncio.TimerHandle | None = None
        self._refetch_task: asyncio.Task | None = None
        self._dispatch_generation = 0
        self._closed = False

    @property
    def cache(self) -> LocalCache:
        return self._cache

    @property
    def resource(self) -> str:
        return self._resource

    @property
    def pending_mutations(self) -> list[Mutation]:
        return list(self._in_flight.values())

    @property
    def recent_mutations(self) -> list[Mutation]:
        """Settled mutations, oldest first."""
        return list(self._history)

    @property
    def refetch_scheduled(self) -> bool:
        return self._refetch_handle is not None

    # ── Local mutations ──────────────────────────────────────────────

    async def create(self, payload: dict[str, Any]) -> Entity:
        """Insert a speculative row, then swap in the server's record."""
        payload = dict(payload)
        temp_key = new_temp_key()
        mutation = self._begin(MutationKind.CREATE, payload, temp_key=temp_key)
        self._cache.append(Entity(fields=payload, optimistic=True, temp_key=temp_key))
        slog.step_start(SyncStage.CREATE, f"Optimistic create in {self._resource}", temp_key=temp_key)

        try:
            record = await self._api.create(self._resource, payload)
        except Exception as exc:
            self._rollback(mutation, exc)
            raise

        self._cache.remove_temp(temp_key)
        identity = resolve_identity(record)
        if identity is None:
            logger.warning("Created %s record has no identity; appending as-is", self._resource)
            entity = Entity(fields=dict(record))
            self._cache.append(entity)
        else:
            # A created notification may already have delivered this record.
            entity = self._cache.upsert(identity, record, optimistic=False)
        self._confirm(mutation, identity=identity)
        return entity

    async def update(self, identity: Any, patch: dict[str, Any]) -> Entity:
        """Apply ``patch`` in place, then merge the server's authoritative fields."""
        target = self._require(identity)
        patch = dict(patch)
        target_identity = target.identity
        mutation = self._begin(MutationKind.UPDATE, patch, target=target_identity, previous=target)
        self._cache.replace_entity(target, target.merged(patch, optimistic=True))
        slog.step_start(SyncStage.UPDATE, f"Optimistic update in {self._resource}", identity=target_identity)

        try:
            record = await self._api.update(self._resource, target_identity, patch)
        except Exception as exc:
            self._rollback(mutation, exc)
            raise

        self._confirm(mutation, identity=target_identity)
        current = self._cache.find_by_identity(target_identity)
        if current is None:
            slog.detail("Updated record left the cache meanwhile; not re-adding", identity=target_identity)
            return Entity(fields=dict(record))
        settled = current.merged(record, optimistic=self._has_pending_for(target_identity))
        self._cache.replace_entity(current, settled)
        return settled

    async def delete(self, identity: Any) -> None:
        """Remove the row immediately; restore it if the server refuses."""
        target = self._require(identity)
        target_identity = target.identity
        mutation = self._begin(
            MutationKind.DELETE,
            {},
            target=target_identity,
            previous=target,
            index=self._cache.position(target),
        )
        self._cache.remove(target_identity)
        slog.step_start(SyncStage.DELETE, f"Optimistic delete in {self._resource}", identity=target_identity)

        try:
            await self._api.delete(self._resource, target_identity)
        except Exception as exc:
            self._rollback(mutation, exc)
            raise

        self._confirm(mutation, identity=target_identity)

    def _require(self, identity: Any) -> Entity:
        target = self._cache.find_by_identity(identity)
        if target is None:
            error = IdentityResolutionError(self._resource, identity)
            slog.step_error(SyncStage.ERROR, "Mutation target not found", error=error)
            raise error
        return target

    def _begin(
        self,
        kind: MutationKind,
        payload: dict[str, Any],
        *,
        target: Any | None = None,
        temp_key: str | None = None,
        previous: Entity | None = None,
        index: int | None = None,
    ) -> Mutation:
        mutation = Mutation(
            kind=kind,
            resource=self._resource,
            payload=payload,
            target=target,
            temp_key=temp_key,
            previous=previous,
            index=index,
        )
        self._in_flight[mutation.id] = mutation
        self._dispatch_generation += 1
        return mutation

    def _settle(self, mutation: Mutation) -> None:
        self._in_flight.pop(mutation.id, None)
        self._history.append(mutation)
        self.schedule_refetch()

    def _confirm(self, mutation: Mutation, *, identity: Any | None) -> None:
        mutation.mark_confirmed()
        self._settle(mutation)
        slog.step_complete(
            SyncStage.CONFIRM,
            f"{mutation.kind.value} confirmed in {self._resource}",
            identity=identity,
        )

    def _rollback(self, mutation: Mutation, error: Exception) -> None:
        mutation.mark_rolled_back(str(error))
        self._settle(mutation)
        self._undo(mutation)
        slog.step_error(
            SyncStage.ROLLBACK,
            f"{mutation.kind.value} in {self._resource} rolled back",
            error=error,
        )

    def _undo(self, mutation: Mutation) -> None:
        """Revert this mutation's optimistic change alone.

        Run on its own, the result equals the cache before dispatch.
        """
        if mutation.kind is MutationKind.CREATE:
            self._cache.remove_temp(mutation.temp_key)
            return

        previous = mutation.previous
        optimistic = self._has_pending_for(mutation.target)
        current = self._cache.find_by_identity(mutation.target)

        if mutation.kind is MutationKind.DELETE:
            # A created notification may already have brought it back.
            if current is None:
                index = len(self._cache) if mutation.index is None else mutation.index
                self._cache.insert(index, previous.with_optimistic(optimistic))
            return

        if current is None:
            slog.detail("Rolled-back update target left the cache; nothing to revert")
            return
        self._cache.replace_entity(
            current, current.reverted(mutation.payload, previous, optimistic=optimistic)
        )

    def _has_pending_for(self, identity: Any) -> bool:
        wanted = normalize_identity(identity)
        return any(
            normalize_identity(m.target) == wanted
            for m in self._in_flight.values()
            if m.target is not None
        )

    # ── Remote notifications ─────────────────────────────────────────

    def apply_event(self, event: ChangeEvent) -> None:
        """Merge another client's change into the cache (last writer wins)."""
        if self._closed:
            return

        data = event.data
        if event.action is ChangeAction.CREATED:
            if self._cache.find_matching(data) is not None:
                slog.detail("Duplicate created notification ignored", event=event.event_type)
            else:
                self._cache.append(Entity(fields=dict(data)))
                slog.step_complete(SyncStage.NOTIFY, f"Added remote {event.entity_type}")

        elif event.action is ChangeAction.UPDATED:
            current = self._cache.find_matching(data)
            if current is None:
                slog.detail("Update notification for unknown record dropped", event=event.event_type)
            else:
                patch = self._unprotected_fields(current, event)
                self._cache.replace_entity(current, current.merged(patch))
                slog.step_complete(SyncStage.NOTIFY, f"Merged remote {event.entity_type} update")

        elif event.action is ChangeAction.DELETED:
            removed = self._cache.remove_matching(data)
            if removed:
                slog.step_complete(SyncStage.NOTIFY, f"Removed remote {event.entity_type}", count=removed)

        self.schedule_refetch()

    def _unprotected_fields(self, current: Entity, event: ChangeEvent) -> dict[str, Any]:
        """Fields of an update notification allowed to overwrite cached values.

        A field written by an in-flight local update keeps its optimistic
        value unless the notification is stamped strictly after that
        update was dispatched.
        """
        guarding = [
            m for m in self._in_flight.values()
            if m.kind is MutationKind.UPDATE and m.target is not None and current.matches(m.target)
        ]
        if not guarding:
            return dict(event.data)

        event_time = _as_utc(event.timestamp)
        patch: dict[str, Any] = {}
        for name, value in event.data.items():
            guards = [m for m in guarding if name in m.payload]
            if guards and (event_time is None or any(event_time <= m.dispatched_at for m in guards)):
                slog.detail("Kept in-flight local value", field=name)
                continue
            patch[name] = value
        return patch

    # ── Backstop refetch ─────────────────────────────────────────────

    def schedule_refetch(self, delay: float | None = None) -> None:
        """(Re)start the single debounced refetch timer."""
        if self._closed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; refetch for %s not scheduled", self._resource)
            return
        if self._refetch_handle is not None:
            self._refetch_handle.cancel()
        self._refetch_handle = loop.call_later(
            self._refetch_delay if delay is None else delay, self._start_refetch
        )

    def _start_refetch(self) -> None:
        self._refetch_handle = None
        if self._closed:
            return
        if self._in_flight or (self._refetch_task is not None and not self._refetch_task.done()):
            self.schedule_refetch()
            return
        self._refetch_task = asyncio.create_task(self._run_refetch())

    async def _run_refetch(self) -> None:
        try:
            await self.refetch()
        except Exception as exc:
            logger.warning("Backstop refetch of %s failed: %s", self._resource, exc)

    async def refetch(self) -> bool:
        """Replace the cache with the authoritative collection.

        Returns False (and reschedules) when a mutation was dispatched while
        the request was out, since the response may predate it.
        """
        generation = self._dispatch_generation
        with slog.timed_step(SyncStage.REFETCH, f"Refetching {self._resource}"):
            records = await self._api.list(self._resource)

        if generation != self._dispatch_generation or self._in_flight:
            slog.detail("Discarding refetch that raced a local mutation")
            self.schedule_refetch()
            return False

        self._cache.replace(self._dedupe(records))
        return True

    def _dedupe(self, records: list[dict[str, Any]]) -> list[Entity]:
        seen: set[str] = set()
        entities: list[Entity] = []
        for record in records:
            key = normalize_identity(resolve_identity(record))
            if key is not None:
                if key in seen:
                    logger.warning("Duplicate %s identity %s in fetched list", self._resource, key)
                    continue
                seen.add(key)
            entities.append(Entity(fields=dict(record)))
        return entities

    async def close(self) -> None:
        """Cancel the pending refetch timer and any refetch in progress."""
        self._closed = True
        if self._refetch_handle is not None:
            self._refetch_handle.cancel()
            self._refetch_handle = None
        if self._refetch_task is not None and not self._refetch_task.done():
            self._refetch_task.cancel()
            try:
                await self._refetch_task
            except asyncio.CancelledError:
                pass
