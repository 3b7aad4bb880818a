"""Integration tests for the content CRUD endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from cms_sync.application.interfaces import ContentEntryRepository
from cms_sync.application.services import ChangeBroadcaster, ContentService
from cms_sync.config import Settings
from cms_sync.domain.entities import ContentEntry
from cms_sync.infrastructure import dependencies
from cms_sync.infrastructure.dependencies import get_content_service
from cms_sync.main import create_app


class InMemoryContentEntryRepository(ContentEntryRepository):
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
        self._entries[entry.id] = entry
        return entry

    async def delete(self, entry: ContentEntry) -> bool:
        return self._entries.pop(entry.id, None) is not None


@pytest.fixture
def app():
    repository = InMemoryContentEntryRepository()
    broadcaster = ChangeBroadcaster()
    application = create_app()
    application.dependency_overrides[get_content_service] = lambda: ContentService(
        repository, broadcaster
    )
    return application


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


class TestCrud:
    async def test_create_returns_flat_record(self, client):
        response = await client.post(
            "/api/admin/projects", json={"title": "Site", "id": 55, "docId": "spoof"}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == 1
        assert body["docId"] != "spoof"
        assert body["title"] == "Site"
        assert "createdAt" in body and "updatedAt" in body

    async def test_public_list_shows_created_entries(self, client):
        await client.post("/api/admin/services", json={"title": "Hosting"})
        await client.post("/api/admin/services", json={"title": "SEO"})

        response = await client.get("/api/services")

        assert response.status_code == 200
        assert [r["title"] for r in response.json()] == ["Hosting", "SEO"]

    async def test_update_by_doc_id_or_numeric_id(self, client):
        created = (await client.post("/api/admin/testimonials", json={"quote": "Great", "rating": 4})).json()

        by_doc = await client.put(f"/api/admin/testimonials/{created['docId']}", json={"rating": 5})
        by_id = await client.put("/api/admin/testimonials/1", json={"quote": "Superb"})

        assert by_doc.status_code == 200
        assert by_id.json() | {"updatedAt": None} == {
            "id": 1,
            "docId": created["docId"],
            "quote": "Superb",
            "rating": 5,
            "createdAt": created["createdAt"],
            "updatedAt": None,
        }

    async def test_delete_reports_both_identities(self, client):
        created = (await client.post("/api/admin/team-members", json={"name": "Ada"})).json()

        response = await client.delete(f"/api/admin/team-members/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Team member successfully deleted",
            "id": created["id"],
            "docId": created["docId"],
        }
        assert (await client.get("/api/team-members")).json() == []

    async def test_missing_entry_is_404(self, client):
        assert (await client.put("/api/admin/projects/42", json={"title": "x"})).status_code == 404
        assert (await client.delete("/api/admin/projects/42")).status_code == 404

    async def test_unknown_resource_is_404(self, client):
        assert (await client.get("/api/widgets")).status_code == 404
        assert (await client.post("/api/admin/widgets", json={})).status_code == 404


class TestAdminToken:
    @pytest.fixture(autouse=True)
    def configured_token(self, monkeypatch):
        settings = Settings(_env_file=None, admin_api_token="s3cret")
        monkeypatch.setattr(dependencies, "get_settings", lambda: settings)

    async def test_missing_token_is_rejected(self, client):
        response = await client.post("/api/admin/projects", json={"title": "x"})
        assert response.status_code == 401

    async def test_wrong_token_is_rejected(self, client):
        response = await client.post(
            "/api/admin/projects",
            json={"title": "x"},
            headers={"Authorization": "Bearer nope"},
        )
        assert response.status_code == 401

    async def test_valid_token_is_accepted(self, client):
        response = await client.post(
            "/api/admin/projects",
            json={"title": "x"},
            headers={"Authorization": "Bearer s3cret"},
        )
        assert response.status_code == 201

    async def test_public_list_needs_no_token(self, client):
        assert (await client.get("/api/projects")).status_code == 200
