"""Unit tests for the ContentService."""

import asyncio
import json

import pytest

from cms_sync.application.interfaces import ContentEntryRepository
from cms_sync.application.services import ChangeBroadcaster, ContentService
from cms_sync.domain.entities import ContentEntry, ContentType
from cms_sync.domain.exceptions import EntityNotFoundError


class FakeContentEntryRepository(ContentEntryRepository):
    """In-memory fake repository for unit testing."""

    def __init__(self):
        self._entries: dict[int, ContentEntry] = {}
        self._next_id = 1

    async def get(self, content_type: str, entry_id: str) -> ContentEntry | None:
        for entry in self._entries.values():
            if entry.content_type == content_type and entry_id in (str(entry.id), entry.doc_id):
                return entry
        return None

    async def get_all(self, content_type: str) -> list[ContentEntry]:
        return [e for e in self._entries.values() if e.content_type == content_type]

    async def create(self, entry: ContentEntry) -> ContentEntry:
        entry.id = self._next_id
        self._next_id += 1
        self._entries[entry.id] = entry
        return entry

    async def update(self, entry: ContentEntry) -> ContentEntry:
        if entry.id not in self._entries:
            raise ValueError(f"ContentEntry {entry.id} not found")
        self._entries[entry.id] = entry
        return entry

    async def delete(self, entry: ContentEntry) -> bool:
        return self._entries.pop(entry.id, None) is not None


class CapturingBroadcaster(ChangeBroadcaster):
    def __init__(self):
        super().__init__()
        self.sent: list[tuple[str, dict]] = []

    async def broadcast(self, event_type, data):
        self.sent.append((event_type, data))
        return await super().broadcast(event_type, data)


@pytest.fixture
def broadcaster() -> CapturingBroadcaster:
    return CapturingBroadcaster()


@pytest.fixture
def service(broadcaster) -> ContentService:
    return ContentService(FakeContentEntryRepository(), broadcaster)


async def test_create_entry_assigns_ids_and_broadcasts(service, broadcaster):
    entry = await service.create_entry(ContentType.PROJECT, {"title": "Site", "id": 999})

    assert entry.id == 1
    assert entry.doc_id
    assert entry.data == {"title": "Site"}
    event_type, data = broadcaster.sent[0]
    assert event_type == "project_created"
    assert data["docId"] == entry.doc_id
    assert data["title"] == "Site"


async def test_entries_are_scoped_by_content_type(service):
    await service.create_entry(ContentType.PROJECT, {"title": "P"})
    await service.create_entry(ContentType.SERVICE, {"title": "S"})

    projects = await service.list_entries(ContentType.PROJECT)

    assert [e.data["title"] for e in projects] == ["P"]
    with pytest.raises(EntityNotFoundError):
        await service.get_entry(ContentType.SERVICE, "1")


async def test_update_merges_and_is_addressable_by_doc_id(service, broadcaster):
    created = await service.create_entry(ContentType.TEAM_MEMBER, {"name": "Ada", "role": "CTO"})

    updated = await service.update_entry(ContentType.TEAM_MEMBER, created.doc_id, {"role": "CEO"})

    assert updated.data == {"name": "Ada", "role": "CEO"}
    assert broadcaster.sent[-1][0] == "team_member_updated"


async def test_update_missing_entry_raises(service):
    with pytest.raises(EntityNotFoundError):
        await service.update_entry(ContentType.PROJECT, "404", {"title": "x"})


async def test_delete_broadcasts_both_identities(service, broadcaster):
    created = await service.create_entry(ContentType.BLOG_POST, {"title": "Hello"})

    await service.delete_entry(ContentType.BLOG_POST, str(created.id))

    assert broadcaster.sent[-1] == ("blog_post_deleted", {"id": created.id, "docId": created.doc_id})
    assert await service.list_entries(ContentType.BLOG_POST) == []


async def test_broadcast_reaches_subscribers(service, broadcaster):
    stream = broadcaster.subscribe()
    receiver = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)
    await service.create_entry(ContentType.PROJECT, {"title": "Live"})
    message = json.loads(await receiver)
    await stream.aclose()

    assert message["type"] == "project_created"
    assert message["data"]["title"] == "Live"
    assert "timestamp" in message
