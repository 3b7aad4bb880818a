"""Unit tests for content types and stored entries."""

import pytest

from cms_sync.domain.entities import ContentEntry, ContentType, Entity
from cms_sync.domain.exceptions import UnknownContentTypeError


def test_resource_paths_round_trip():
    for content_type in ContentType:
        assert ContentType.from_resource(content_type.resource) is content_type
    assert ContentType.TEAM_MEMBER.resource == "team-members"


def test_unknown_resource_raises():
    with pytest.raises(UnknownContentTypeError):
        ContentType.from_resource("widgets")


class TestContentEntry:
    def test_reserved_fields_are_stripped(self):
        entry = ContentEntry(
            content_type="project",
            data={"title": "x", "id": 4, "docId": "spoof", "createdAt": "then"},
        )
        assert entry.data == {"title": "x"}

    def test_update_merges_and_touches_timestamp(self):
        entry = ContentEntry(content_type="project", data={"title": "x", "order": 1})
        before = entry.updated_at

        entry.update({"order": 2, "id": 99})

        assert entry.data == {"title": "x", "order": 2}
        assert entry.updated_at >= before

    def test_payload_is_flat(self):
        entry = ContentEntry(content_type="service", data={"title": "SEO"}, id=3)
        payload = entry.to_payload()

        assert payload["title"] == "SEO"
        assert payload["id"] == 3
        assert payload["docId"] == entry.doc_id
        assert "createdAt" in payload and "updatedAt" in payload


class TestEntity:
    def test_key_falls_back_to_temp_key(self):
        assert Entity(fields={"title": "x"}, temp_key="temp-1").key == "temp-1"
        assert Entity(fields={"id": 2}, temp_key="temp-1").key == 2

    def test_merged_returns_new_instance(self):
        entity = Entity(fields={"id": 1, "title": "a"})
        merged = entity.merged({"title": "b"}, optimistic=True)

        assert entity.fields["title"] == "a"
        assert merged.fields["title"] == "b"
        assert merged.optimistic is True
        assert entity.with_optimistic(False) is entity
