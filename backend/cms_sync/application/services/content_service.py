"""Application service (use case) for managed content CRUD."""

import logging
from typing import Any

from cms_sync.application.interfaces import ContentEntryRepository
from cms_sync.application.services.change_broadcaster import ChangeBroadcaster
from cms_sync.domain.entities import ChangeAction, ContentEntry, ContentType
from cms_sync.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


class ContentService:
    """Orchestrates content CRUD and announces every write on the change channel."""

    def __init__(self, repository: ContentEntryRepository, broadcaster: ChangeBroadcaster):
        self._repository = repository
        self._broadcaster = broadcaster

    async def get_entry(self, content_type: ContentType, entry_id: str) -> ContentEntry:
        entry = await self._repository.get(content_type.value, entry_id)
        if entry is None:
            raise EntityNotFoundError(content_type.value, entry_id)
        return entry

    async def list_entries(self, content_type: ContentType) -> list[ContentEntry]:
        return await self._repository.get_all(content_type.value)

    async def create_entry(
        self, content_type: ContentType, data: dict[str, Any]
    ) -> ContentEntry:
        entry = await self._repository.create(
            ContentEntry(content_type=content_type.value, data=data)
        )
        logger.info("Created %s %s (docId=%s)", content_type.value, entry.id, entry.doc_id)
        await self._broadcaster.broadcast_change(
            content_type, ChangeAction.CREATED, entry.to_payload()
        )
        return entry

    async def update_entry(
        self, content_type: ContentType, entry_id: str, patch: dict[str, Any]
    ) -> ContentEntry:
        entry = await self.get_entry(content_type, entry_id)
        entry.update(patch)
        entry = await self._repository.update(entry)
        logger.info("Updated %s %s", content_type.value, entry.id)
        await self._broadcaster.broadcast_change(
            content_type, ChangeAction.UPDATED, entry.to_payload()
        )
        return entry

    async def delete_entry(self, content_type: ContentType, entry_id: str) -> ContentEntry:
        entry = await self.get_entry(content_type, entry_id)
        if not await self._repository.delete(entry):
            raise EntityNotFoundError(content_type.value, entry_id)
        logger.info("Deleted %s %s", content_type.value, entry.id)
        await self._broadcaster.broadcast_change(
            content_type, ChangeAction.DELETED, {"id": entry.id, "docId": entry.doc_id}
        )
        return entry
